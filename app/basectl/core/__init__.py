"""Core configuration, paths, theming and errors for basectl."""
