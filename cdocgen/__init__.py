"""cdocgen — documentation generator for annotated C sources."""

__version__ = "0.1.0"
