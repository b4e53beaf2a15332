"""MongoDB backed transaction resource service."""

__version__ = "1.0.0"
