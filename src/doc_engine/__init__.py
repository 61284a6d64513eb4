"""UI-agnostic document operation engine with undo/redo and table grid algebra."""

__all__ = [
    "actions",
    "adapters",
    "document",
    "history",
    "operations",
    "runtime",
    "table",
]

__version__ = "0.1.0"
