"""Cache geometry and address decoding.

A 64-bit address is split as:

    | tag (t bits) | set index (s bits) | block offset (b bits) |

with t = 64 - s - b. Python integers never overflow, so a zero-width tag
(s + b == 64) or a zero-width set index (s == 0) need no special shifting
tricks, only the masks below.
"""
from dataclasses import dataclass
from typing import NamedTuple

from csim.core.errors import ConfigurationError

ADDRESS_BITS = 64
ADDRESS_MASK = (1 << ADDRESS_BITS) - 1


@dataclass(frozen=True)
class CacheGeometry:
    """Immutable cache shape.

    Fields:
    - s: number of set index bits (S = 2^s sets)
    - E: associativity, lines per set
    - b: number of block offset bits (B = 2^b bytes per block)
    """

    s: int
    E: int
    b: int

    def validate(self) -> "CacheGeometry":
        for name in ("s", "E", "b"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
        if self.s < 0:
            raise ConfigurationError(f"set index bits must be >= 0, got s={self.s}")
        if self.b < 0:
            raise ConfigurationError(f"block offset bits must be >= 0, got b={self.b}")
        if self.E < 1:
            raise ConfigurationError(f"associativity must be >= 1, got E={self.E}")
        if self.s + self.b > ADDRESS_BITS:
            raise ConfigurationError(
                f"s + b must not exceed {ADDRESS_BITS} address bits, got s={self.s}, b={self.b}"
            )
        return self

    @property
    def num_sets(self) -> int:
        return 1 << self.s

    @property
    def block_size(self) -> int:
        return 1 << self.b

    @property
    def tag_bits(self) -> int:
        return ADDRESS_BITS - self.s - self.b


class DecodedAddress(NamedTuple):
    tag: int
    set_index: int
    block_offset: int


def decode_address(address: int, s: int, b: int) -> DecodedAddress:
    """Split `address` into (tag, set_index, block_offset).

    The address is treated as an unsigned 64-bit value.
    """
    a = address & ADDRESS_MASK
    tag = a >> (s + b)
    set_index = (a >> b) & ((1 << s) - 1) if s > 0 else 0
    block_offset = a & ((1 << b) - 1)
    return DecodedAddress(tag, set_index, block_offset)


class AddressDecoder:
    """Decoder bound to one geometry."""

    def __init__(self, geometry: CacheGeometry):
        self.geometry = geometry.validate()
        self._s = geometry.s
        self._b = geometry.b

    def decode(self, address: int) -> DecodedAddress:
        return decode_address(address, self._s, self._b)

    def __call__(self, address: int) -> DecodedAddress:
        return self.decode(address)


__all__ = ["ADDRESS_BITS", "CacheGeometry", "DecodedAddress", "decode_address", "AddressDecoder"]
