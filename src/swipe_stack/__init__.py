# file: src/swipe_stack/__init__.py
"""
Swipe mode backend: a consumable stack of cards fed from a paged remote source.

Modules:
- controller.py: StackController: lookahead stack, cursor, single-flight replenishment.
- http_source.py / supabase_source.py: remote paged sources.
- main.py: FastAPI adapter for the swipe UI.
"""
from .controller import LOW_WATER_MARK, StackController
from .models import Artist, Item, Page, Polarity, SeedRequest
from .result import Err, ErrorKind, Ok, RemoteError, Result

__all__ = [
    "LOW_WATER_MARK",
    "StackController",
    "Artist",
    "Item",
    "Page",
    "Polarity",
    "SeedRequest",
    "Err",
    "ErrorKind",
    "Ok",
    "RemoteError",
    "Result",
]
