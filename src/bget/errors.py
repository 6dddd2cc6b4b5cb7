"""Exception hierarchy for bget."""

from __future__ import annotations

from enum import IntEnum


class TransferErrorCode(IntEnum):
    """Numeric transport error codes, matching the native transfer library."""

    UNSUPPORTED_PROTOCOL = 1
    URL_MALFORMAT = 3
    COULDNT_RESOLVE_PROXY = 5
    COULDNT_RESOLVE_HOST = 6
    COULDNT_CONNECT = 7
    READ_ERROR = 26
    OPERATION_TIMEDOUT = 28
    SSL_CONNECT_ERROR = 35
    TOO_MANY_REDIRECTS = 47
    GOT_NOTHING = 52
    RECV_ERROR = 56
    BAD_CONTENT_ENCODING = 61


class ConfigErrorCode(IntEnum):
    """Reasons a configuration change was refused."""

    UNKNOWN_OPTION = 1
    USE_SET_REQUEST_HEADER = 2
    USE_SET_POST_FIELD = 3
    INVALID_HEADER = 4
    INVALID_CONFIG = 5


class HttpErrorCode(IntEnum):
    """Reasons an HTTP response could not be interpreted."""

    HEADERS_NOT_EXTRACTABLE = 1


class BgetError(Exception):
    """Base class for all bget errors. Every error carries a numeric ``code``."""

    def __init__(self, message: str, code: int) -> None:
        super().__init__(message)
        self.code = code

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r}, code={int(self.code)})"


class TransferError(BgetError):
    """The transfer engine failed (DNS, connect, TLS, malformed URI...)."""

    def __init__(self, message: str, code: TransferErrorCode) -> None:
        super().__init__(message, code)


class ConfigError(BgetError):
    """A configuration change was refused."""

    def __init__(self, message: str, code: ConfigErrorCode) -> None:
        super().__init__(message, code)


class HttpError(BgetError):
    """An HTTP response could not be interpreted."""

    def __init__(self, message: str, code: HttpErrorCode) -> None:
        super().__init__(message, code)


class HeadersNotExtractableError(HttpError):
    """No header block could be separated from the response body."""

    def __init__(self, message: str = "Could not extract HTTP headers from response") -> None:
        super().__init__(message, HttpErrorCode.HEADERS_NOT_EXTRACTABLE)
