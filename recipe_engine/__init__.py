"""Recipe cache and serving-size scaling core."""

__version__ = "0.1.0"
