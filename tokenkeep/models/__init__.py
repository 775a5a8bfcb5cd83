"""
Models package

Database models, one per file:
- token.py
- tokenevent.py
"""

from .token import Token
from .tokenevent import TokenEvent

__all__ = [
    "Token",
    "TokenEvent",
]
