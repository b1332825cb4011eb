"""cloudmap: local relationship graph of cloud account resources."""

__version__ = "0.1.0"
