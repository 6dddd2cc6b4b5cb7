"""Client façades."""

from .client import Bget
from .http_client import BgetHttp

__all__ = ["Bget", "BgetHttp"]
