"""Transfer engines for bget."""

from .engine import RequestsEngine
from .protocols import TransferEngine, TransferResult

__all__ = [
    "RequestsEngine",
    "TransferEngine",
    "TransferResult",
]
