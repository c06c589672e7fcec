"""Sales pitch practice against an AI-simulated buyer persona."""

__version__ = "0.1.0"
