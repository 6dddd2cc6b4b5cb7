"""HTTP message parsing for bget."""

from .headers import HeaderMap
from .parser import ParsedResponse, ResponseStatus, parse_request_headers, split_response

__all__ = [
    "HeaderMap",
    "ParsedResponse",
    "ResponseStatus",
    "parse_request_headers",
    "split_response",
]
