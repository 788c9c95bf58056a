"""DocAssist - document console and documentation assistant for a document index."""

__version__ = "0.1.0"
