"""An interactive Unix shell with job control, and its job-list helpers."""

__version__ = "0.1.0"
__all__ = ["jobs", "shell"]