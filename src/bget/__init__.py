"""
bget - Better Getter, a small HTTP client façade over a transfer engine.

Usage:
    from bget import BgetHttp, Option

    bg = BgetHttp("https://example.com/")
    bg.set_option(Option.USERAGENT, "Better Getter").execute()

    print(bg.get_response_status("code"))
    print(bg.get_response_header("Content-Type"))
    print(bg.get_response_body())
"""

__version__ = "1.0.0"

from .core import Bget, BgetHttp
from .errors import (
    BgetError,
    ConfigError,
    ConfigErrorCode,
    HeadersNotExtractableError,
    HttpError,
    HttpErrorCode,
    TransferError,
    TransferErrorCode,
)
from .http import HeaderMap, ParsedResponse, ResponseStatus, parse_request_headers, split_response
from .models import ClientConfig
from .options import Option
from .transfer import RequestsEngine, TransferEngine, TransferResult

__all__ = [
    "__version__",
    # Clients
    "Bget",
    "BgetHttp",
    "Option",
    "ClientConfig",
    # Parsing
    "HeaderMap",
    "ParsedResponse",
    "ResponseStatus",
    "parse_request_headers",
    "split_response",
    # Engines
    "RequestsEngine",
    "TransferEngine",
    "TransferResult",
    # Errors
    "BgetError",
    "ConfigError",
    "ConfigErrorCode",
    "HeadersNotExtractableError",
    "HttpError",
    "HttpErrorCode",
    "TransferError",
    "TransferErrorCode",
]
