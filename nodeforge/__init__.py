"""nodeforge -- Node.js project generator."""

__version__ = "0.1.0"
