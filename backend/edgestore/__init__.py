"""EdgeStore — local reactive data store for the EDGEMAKERS website."""

__version__ = "0.1.0"
