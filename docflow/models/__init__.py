"""Database models for the Docflow backend."""

from .document import Document
from .todo import Todo

__all__ = [
    "Document",
    "Todo",
]
