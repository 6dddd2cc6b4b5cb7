"""Transfer engine backed by requests."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from contextlib import ExitStack
from pathlib import Path
from types import TracebackType
from typing import Any
from urllib.parse import quote, urlparse

import requests
from charset_normalizer import from_bytes as detect_encoding
from requests.structures import CaseInsensitiveDict
from urllib3 import HTTPHeaderDict
from urllib3.exceptions import NameResolutionError

from ..errors import TransferError, TransferErrorCode
from ..http.parser import BOUNDARY, CRLF
from ..options import Option
from .protocols import TransferResult

logger = logging.getLogger(__name__)

HTTP_VERSIONS = {10: "HTTP/1.0", 11: "HTTP/1.1", 20: "HTTP/2"}

# Describe the encoded wire body, not the decoded body that is kept
ENCODED_BODY_HEADERS = frozenset({"content-encoding", "content-length"})

# Options that map straight onto a request header
HEADER_OPTIONS = (
    (Option.USERAGENT, "User-Agent"),
    (Option.REFERER, "Referer"),
    (Option.COOKIE, "Cookie"),
    (Option.ENCODING, "Accept-Encoding"),
)

# Checked in order: subclasses before their bases
ERROR_CODES: tuple[tuple[type[requests.RequestException], TransferErrorCode], ...] = (
    (requests.exceptions.MissingSchema, TransferErrorCode.URL_MALFORMAT),
    (requests.exceptions.InvalidSchema, TransferErrorCode.UNSUPPORTED_PROTOCOL),
    (requests.exceptions.InvalidURL, TransferErrorCode.URL_MALFORMAT),
    (requests.exceptions.ProxyError, TransferErrorCode.COULDNT_RESOLVE_PROXY),
    (requests.exceptions.SSLError, TransferErrorCode.SSL_CONNECT_ERROR),
    (requests.exceptions.Timeout, TransferErrorCode.OPERATION_TIMEDOUT),
    (requests.exceptions.TooManyRedirects, TransferErrorCode.TOO_MANY_REDIRECTS),
    (requests.exceptions.ContentDecodingError, TransferErrorCode.BAD_CONTENT_ENCODING),
    (requests.exceptions.ChunkedEncodingError, TransferErrorCode.RECV_ERROR),
)

RESOLUTION_FAILURE_MARKERS = (
    "Failed to resolve",
    "Name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "Temporary failure in name resolution",
)


class RequestsEngine:
    """
    Transfer engine that performs requests through a ``requests.Session``.

    Translates bget transfer options into request arguments, rebuilds the
    raw response text (status line, headers, blank line, body) and echoes
    the request headers that were actually sent, so that callers can parse
    both with the same HTTP parser.

    Example:
        with RequestsEngine() as engine:
            result = engine.perform(
                "https://example.com",
                {Option.USERAGENT: "Better Getter", Option.FOLLOWLOCATION: True},
            )
            print(result.raw_response)
    """

    DEFAULT_MAX_REDIRECTS = 30

    # Options with no requests equivalent
    UNSUPPORTED_OPTIONS = frozenset({Option.AUTOREFERER, Option.HTTPPROXYTUNNEL})

    def __init__(self, session: requests.Session | None = None) -> None:
        """
        Initialize the engine.

        Args:
            session: Session to use; a new one is created if omitted
        """
        self._session = session if session is not None else requests.Session()

    def __enter__(self) -> RequestsEngine:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying session and its connection pool."""
        self._session.close()

    def perform(self, uri: str, options: Mapping[Option, Any]) -> TransferResult:
        """
        Perform one transfer.

        Args:
            uri: The URI to access
            options: Transfer options

        Returns:
            TransferResult with the raw response and metadata

        Raises:
            TransferError: On any transport failure, or READ_ERROR if an
                uploaded file cannot be opened
        """
        if not uri:
            raise TransferError("No URI set", TransferErrorCode.URL_MALFORMAT)

        for option in self.UNSUPPORTED_OPTIONS.intersection(options):
            logger.debug(f"Option {option.name} is not supported by the requests engine, ignoring")

        method = self.request_method(options)
        max_redirects = options.get(Option.MAXREDIRS)
        self._session.max_redirects = self.DEFAULT_MAX_REDIRECTS if max_redirects is None else int(max_redirects)

        with ExitStack() as stack:
            try:
                kwargs = self.build_request_kwargs(options, stack)
            except OSError as e:
                logger.warning(f"Cannot read upload for {uri}: {e}")
                raise TransferError(str(e), TransferErrorCode.READ_ERROR) from e
            logger.debug(f"{method} {uri}")
            try:
                response = self._session.request(method, uri, **kwargs)
            except requests.RequestException as e:
                code = self.error_code(e)
                logger.warning(f"Transfer of {uri} failed with code {int(code)}: {e}")
                raise TransferError(str(e), code) from e

        return TransferResult(
            raw_response=self.build_raw_response(response),
            status_code=response.status_code,
            effective_url=response.url,
            request_headers=self.build_request_echo(response),
            info={
                "http_code": response.status_code,
                "effective_url": response.url,
                "content_type": response.headers.get("Content-Type", ""),
                "redirect_count": len(response.history),
                "size_download": len(response.content),
                "total_time": response.elapsed.total_seconds(),
            },
        )

    @staticmethod
    def request_method(options: Mapping[Option, Any]) -> str:
        """Choose the HTTP method the options imply."""
        custom = options.get(Option.CUSTOMREQUEST)
        if custom:
            return str(custom).upper()
        if options.get(Option.NOBODY):
            return "HEAD"
        if options.get(Option.HTTPGET):
            return "GET"
        if options.get(Option.POSTFIELDS) is not None or options.get(Option.POST):
            return "POST"
        return "GET"

    def build_request_kwargs(self, options: Mapping[Option, Any], stack: ExitStack) -> dict[str, Any]:
        """
        Translate transfer options into ``requests`` keyword arguments.

        Args:
            options: Transfer options
            stack: Exit stack that owns any files opened for upload

        Returns:
            Keyword arguments for ``Session.request``
        """
        kwargs: dict[str, Any] = {
            "headers": self._build_headers(options),
            "allow_redirects": bool(options.get(Option.FOLLOWLOCATION, False)),
        }

        userpwd = options.get(Option.USERPWD)
        if userpwd:
            user, _, password = str(userpwd).partition(":")
            kwargs["auth"] = (user, password)

        proxy = options.get(Option.PROXY)
        if proxy:
            proxy_url = self._proxy_url(str(proxy), options.get(Option.PROXYUSERPWD))
            kwargs["proxies"] = {"http": proxy_url, "https": proxy_url}

        connect_timeout = options.get(Option.CONNECTTIMEOUT)
        total_timeout = options.get(Option.TIMEOUT)
        if connect_timeout is not None or total_timeout is not None:
            kwargs["timeout"] = (connect_timeout if connect_timeout is not None else total_timeout, total_timeout)

        if options.get(Option.SSL_VERIFYPEER) is False:
            kwargs["verify"] = False
        elif options.get(Option.CAINFO):
            kwargs["verify"] = str(options[Option.CAINFO])
        if options.get(Option.SSLCERT):
            kwargs["cert"] = str(options[Option.SSLCERT])

        fields = options.get(Option.POSTFIELDS)
        if isinstance(fields, Mapping):
            kwargs["files"] = self._multipart_fields(fields, stack)
        elif fields is not None:
            kwargs["data"] = fields

        return kwargs

    @staticmethod
    def _build_headers(options: Mapping[Option, Any]) -> CaseInsensitiveDict:
        """
        Merge header-like options with explicit HTTPHEADER lines.

        Explicit lines win. A line with an empty value (``"Accept:"``)
        suppresses a header that would otherwise be sent.
        """
        headers: CaseInsensitiveDict = CaseInsensitiveDict()
        for option, name in HEADER_OPTIONS:
            value = options.get(option)
            if value:
                headers[name] = str(value).strip()

        explicit: set[str] = set()
        for line in options.get(Option.HTTPHEADER) or []:
            name, _, value = str(line).partition(":")
            name, value = name.strip(), value.strip()
            if not name:
                continue
            if not value:
                headers[name] = None
            elif name.lower() in explicit and headers.get(name):
                headers[name] = f"{headers[name]}, {value}"
            else:
                headers[name] = value
            explicit.add(name.lower())
        return headers

    @staticmethod
    def _proxy_url(proxy: str, credentials: Any) -> str:
        scheme, sep, rest = proxy.partition("://")
        if not sep:
            scheme, rest = "http", proxy
        if credentials:
            user, _, password = str(credentials).partition(":")
            rest = f"{quote(user, safe='')}:{quote(password, safe='')}@{rest}"
        return f"{scheme}://{rest}"

    @staticmethod
    def _multipart_fields(fields: Mapping[str, Any], stack: ExitStack) -> dict[str, tuple[Any, Any]]:
        """Build a multipart payload; ``Path`` values upload the file."""
        files: dict[str, tuple[Any, Any]] = {}
        for name, value in fields.items():
            if isinstance(value, Path):
                files[name] = (value.name, stack.enter_context(value.open("rb")))
            else:
                files[name] = (None, str(value))
        return files

    @staticmethod
    def error_code(error: requests.RequestException) -> TransferErrorCode:
        """Map a requests exception to the matching transfer error code."""
        for exc_type, code in ERROR_CODES:
            if isinstance(error, exc_type):
                return code

        if isinstance(error, requests.exceptions.ConnectionError):
            reason = getattr(error.args[0], "reason", None) if error.args else None
            text = str(error)
            if isinstance(reason, NameResolutionError) or any(m in text for m in RESOLUTION_FAILURE_MARKERS):
                return TransferErrorCode.COULDNT_RESOLVE_HOST
            if "RemoteDisconnected" in text or "Connection aborted" in text:
                return TransferErrorCode.GOT_NOTHING
            return TransferErrorCode.COULDNT_CONNECT

        return TransferErrorCode.RECV_ERROR

    def build_raw_response(self, response: requests.Response) -> str:
        """
        Rebuild the raw response text from a requests response.

        Header order and repeated headers come from urllib3; the body is the
        decoded content. When the body arrived content-encoded, the
        Content-Encoding and Content-Length headers are left out since they
        no longer match it.
        """
        protocol = HTTP_VERSIONS.get(getattr(response.raw, "version", None), "HTTP/1.1")
        status_line = f"{protocol} {response.status_code} {response.reason or ''}".rstrip()

        raw_headers = getattr(response.raw, "headers", None)
        items = raw_headers.items() if isinstance(raw_headers, HTTPHeaderDict) else response.headers.items()
        if response.headers.get("Content-Encoding", "identity").lower() != "identity":
            items = [(name, value) for name, value in items if name.lower() not in ENCODED_BODY_HEADERS]
        lines = [status_line, *(f"{name}: {value}" for name, value in items)]

        content_type = response.headers.get("Content-Type", "")
        return CRLF.join(lines) + BOUNDARY + self.decode_content(response.content, content_type)

    @staticmethod
    def build_request_echo(response: requests.Response) -> str:
        """Rebuild the header blocks of every request sent, redirects included."""
        blocks = []
        for hop in [*response.history, response]:
            prepared = hop.request
            if prepared is None:
                continue
            parsed = urlparse(prepared.url)
            host = parsed.hostname or ""
            if parsed.port:
                host = f"{host}:{parsed.port}"
            lines = [f"{prepared.method} {prepared.path_url} HTTP/1.1", f"Host: {host}"]
            lines.extend(f"{name}: {value}" for name, value in prepared.headers.items() if name.lower() != "host")
            blocks.append(CRLF.join(lines) + BOUNDARY)
        return "".join(blocks)

    @staticmethod
    def decode_content(content: bytes, content_type: str) -> str:
        """
        Decode content with encoding detection.

        Fallback chain:
        1. Content-Type header charset
        2. Strict UTF-8
        3. charset-normalizer detection
        4. UTF-8 with replacement

        Args:
            content: Raw bytes content
            content_type: Content-Type header value

        Returns:
            Decoded string
        """
        if not content:
            return ""

        encoding = None
        for part in content_type.split(";"):
            part = part.strip()
            if part.lower().startswith("charset="):
                encoding = part.split("=", 1)[1].strip().strip("\"'")
                break

        if encoding:
            try:
                return content.decode(encoding)
            except (UnicodeDecodeError, LookupError):
                logger.debug(f"Failed to decode with declared encoding: {encoding}")

        try:
            return content.decode("utf-8")
        except UnicodeDecodeError:
            pass

        best_match = detect_encoding(content).best()
        if best_match is not None:
            logger.debug(f"Detected encoding: {best_match.encoding}")
            return str(best_match)

        return content.decode("utf-8", errors="replace")
