"""Asset processing and context-aware resolution for multilingual docs."""

__version__ = "0.1.0"
