"""Group exported Gmail messages into threads, analyze them, and assemble court documents."""

__version__ = "0.1.0"
