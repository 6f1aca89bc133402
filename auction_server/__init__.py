"""
This package contains all the pieces of the timed auction server.
"""

from .api import app
from .engine import AuctionEngine

__all__ = [
    "app",
    "AuctionEngine",
]
