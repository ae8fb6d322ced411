"""Services package - record storage."""
from .store import InMemoryJSIStore, JSIStore, get_store

__all__ = [
    "JSIStore",
    "InMemoryJSIStore",
    "get_store",
]
