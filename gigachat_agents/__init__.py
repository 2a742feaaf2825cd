"""GigaChat automation agents: embedding label classifier and completion."""

__version__ = "0.1.0"
