"""Set-associative cache simulator driven by memory access traces."""

__version__ = "1.0.0"
