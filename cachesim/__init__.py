"""Set-associative cache simulator with next-block prefetching."""

__version__ = "0.1.0"
