"""incompat: a registry of known incompatibilities between package versions."""

__version__ = "0.1.0"
