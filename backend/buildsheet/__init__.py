"""BuildSheet drafting engine — conversational hardware BOM assembly."""

__version__ = "1.0.0"
