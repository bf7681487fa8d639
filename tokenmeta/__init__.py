"""tokenmeta — in-memory metadata lookup service for JSON subject documents."""

__version__ = "0.1.0"
