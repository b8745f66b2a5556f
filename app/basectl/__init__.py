"""basectl - resolve configuration targets into root-restricted loaders."""

__version__ = "0.1.0"
