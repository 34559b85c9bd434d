"""Provider endpoint validation and model discovery."""

__version__ = "0.1.0"
