"""Plugin install steps: download, unpack, validate, copy, delete and run."""

__version__ = "0.1.0"