"""Exceptions raised by the simulator.

- ConfigurationError: invalid geometry, raised before any access is simulated
- TraceFormatError: a trace line that cannot be parsed (strict mode only)
- ResourceError: the cache structure could not be allocated
"""
from typing import Optional


class CsimError(Exception):
    """Base class for all simulator errors."""


class ConfigurationError(CsimError, ValueError):
    pass


class TraceFormatError(CsimError, ValueError):
    def __init__(self, message: str, line_number: Optional[int] = None, line: Optional[str] = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number
        self.line = line


class ResourceError(CsimError, MemoryError):
    pass


__all__ = ["CsimError", "ConfigurationError", "TraceFormatError", "ResourceError"]
