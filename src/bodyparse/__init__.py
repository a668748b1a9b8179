"""HTTP request-body decoding middleware."""

__version__ = "0.1.0"
