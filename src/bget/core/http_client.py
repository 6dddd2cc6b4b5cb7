"""BgetHttp: HTTP headers, POST bodies and response splitting on top of Bget."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..errors import ConfigError, ConfigErrorCode
from ..http.headers import HeaderMap, HeaderValues, as_values
from ..http.parser import ParsedResponse, ResponseStatus, parse_request_headers
from ..http.parser import split_response as parse_response
from ..models.config import ClientConfig
from ..options import Option
from ..transfer.protocols import TransferEngine
from .client import Bget

logger = logging.getLogger(__name__)

# Options managed by dedicated accessors, mapped to the error code raised
# when they are set directly
MANAGED_OPTIONS = {
    Option.HTTPHEADER: (ConfigErrorCode.USE_SET_REQUEST_HEADER, "set_request_header()"),
    Option.POSTFIELDS: (ConfigErrorCode.USE_SET_POST_FIELD, "set_post_field() or set_raw_post_data()"),
}

RESPONSE_STATUS_FIELDS = ("protocol", "code", "status")


def _header_values(name: str, value: HeaderValues) -> list[str]:
    """Validate a header and return its values with surrounding whitespace stripped."""
    if not name or ":" in name or any(c.isspace() for c in name):
        raise ConfigError(f"Invalid header name: {name!r}", ConfigErrorCode.INVALID_HEADER)
    values = as_values(value)
    for item in values:
        if "\r" in item or "\n" in item:
            raise ConfigError(f"Invalid value for header {name}: {item!r}", ConfigErrorCode.INVALID_HEADER)
    return [item.strip() for item in values]


class BgetHttp(Bget):
    """
    HTTP flavour of Bget.

    Adds:
    - Declared request headers, and the headers actually sent once executed
    - POST bodies, as fields (multipart) or raw data
    - Splitting of the raw response into status, headers and body

    Headers and POST fields cannot be set through ``set_option()``; use the
    dedicated accessors so the client can keep track of them.

    Example:
        bg = BgetHttp("https://example.com/form")
        bg.set_request_header("Accept", "text/html")
        bg.set_post_fields({"name": "value"}).execute()
        print(bg.get_response_status("code"), bg.get_response_body())
    """

    def __init__(
        self,
        uri: str | None = None,
        *,
        engine: TransferEngine | None = None,
        config: ClientConfig | None = None,
    ) -> None:
        super().__init__(uri, engine=engine, config=config)
        self._request_headers = HeaderMap(config.headers if config else None)
        self._sent_headers: HeaderMap | None = None
        self._post_fields: dict[str, Any] = {}
        self._raw_post_data: str | bytes | None = None
        self._parsed: ParsedResponse | None = None

    def _check_option(self, option: Option, value: Any) -> None:
        managed = MANAGED_OPTIONS.get(option)
        if managed is not None:
            code, accessor = managed
            raise ConfigError(f"Set {option.name} with {accessor} instead of set_option()", code)

    # Request headers

    def set_request_header(self, name: str, value: HeaderValues | None) -> BgetHttp:
        """
        Set a request header, replacing any earlier values.

        Args:
            name: Header name
            value: A value, a list of values, or None to remove the header

        Raises:
            ConfigError: If the name or a value could break the header block
        """
        if value is None:
            self._request_headers.pop(name, None)
        else:
            self._request_headers[name] = _header_values(name, value)
        self._sent_headers = None
        return self

    def add_request_header(self, name: str, value: str) -> BgetHttp:
        """Append a value to a request header."""
        for stripped in _header_values(name, value):
            self._request_headers.add(name, stripped)
        self._sent_headers = None
        return self

    def set_request_headers(self, headers: Mapping[str, HeaderValues | None]) -> BgetHttp:
        for name, value in headers.items():
            self.set_request_header(name, value)
        return self

    def _current_headers(self) -> HeaderMap:
        return self._sent_headers if self._sent_headers is not None else self._request_headers

    def get_request_header(self, name: str) -> list[str]:
        """
        Values of one request header.

        Before execution these are the declared values; afterwards they are
        the values the engine reports as actually sent.

        Returns:
            List of values (empty if the header is absent)
        """
        return list(self._current_headers().get(name, []))

    def get_request_headers(self) -> HeaderMap:
        return self._current_headers().copy()

    # POST data

    def set_post_field(self, name: str, value: Any) -> BgetHttp:
        """Set a POST field; ``None`` removes it. ``Path`` values upload a file."""
        if value is None:
            self._post_fields.pop(name, None)
        else:
            self._post_fields[name] = value
        return self

    def set_post_fields(self, fields: Mapping[str, Any]) -> BgetHttp:
        for name, value in fields.items():
            self.set_post_field(name, value)
        return self

    def get_post_field(self, name: str) -> Any:
        return self._post_fields.get(name)

    def get_post_fields(self) -> dict[str, Any]:
        return dict(self._post_fields)

    def set_raw_post_data(self, data: str | bytes | None) -> BgetHttp:
        """
        Set a raw POST body. While set, it is sent instead of the POST
        fields; ``None`` falls back to the fields.
        """
        self._raw_post_data = data
        return self

    def get_raw_post_data(self) -> str | bytes | None:
        return self._raw_post_data

    def _transfer_options(self) -> dict[Option, Any]:
        options = super()._transfer_options()
        if self._request_headers:
            options[Option.HTTPHEADER] = self._request_headers.lines()
        if self._raw_post_data is not None:
            if self._post_fields:
                logger.debug("Raw POST data is set; POST fields are not sent")
            options[Option.POSTFIELDS] = self._raw_post_data
        elif self._post_fields:
            options[Option.POSTFIELDS] = dict(self._post_fields)
        return options

    # Execution and response

    def execute(self) -> BgetHttp:
        """
        Run the transfer, then split the response and record the request
        headers that were sent.

        Raises:
            TransferError: If no URI is set or the engine fails
            HeadersNotExtractableError: If the response cannot be split
        """
        super().execute()
        echo = self._result.request_headers if self._result is not None else ""
        self._sent_headers = parse_request_headers(echo) if echo else None
        self.split_response()
        return self

    def _begin_transfer(self) -> None:
        super()._begin_transfer()
        self._sent_headers = None
        self._parsed = None

    def set_raw_response(self, raw_response: str | None) -> BgetHttp:
        super().set_raw_response(raw_response)
        self._parsed = None
        return self

    def split_response(self) -> BgetHttp:
        """
        Split the stored raw response into status, headers and body.

        Raises:
            HeadersNotExtractableError: If there is no header/body boundary
                or no status line
        """
        self._parsed = parse_response(self._raw_response or "")
        return self

    def _response(self) -> ParsedResponse:
        parsed = self._parsed
        if parsed is None:
            parsed = self._parsed = parse_response(self._raw_response or "")
        return parsed

    def get_response_status(self, key: str | None = None) -> Any:
        """
        The parsed status line.

        Args:
            key: One of "protocol", "code" or "status"; the whole
                ResponseStatus if omitted

        Raises:
            KeyError: If key is not a status field
            HeadersNotExtractableError: If the response cannot be split
        """
        status: ResponseStatus = self._response().status
        if key is None:
            return status
        if key not in RESPONSE_STATUS_FIELDS:
            raise KeyError(key)
        return getattr(status, key)

    def get_response_header(self, name: str) -> list[str]:
        """Values of one response header (empty list if absent)."""
        return list(self._response().headers.get(name, []))

    def get_response_headers(self) -> HeaderMap:
        return self._response().headers.copy()

    def get_response_body(self) -> str:
        return self._response().body

    def reset(self) -> BgetHttp:
        """Drop options, headers, POST data and response state; the URI is kept."""
        super().reset()
        self._request_headers = HeaderMap(self._config.headers if self._config else None)
        self._sent_headers = None
        self._post_fields = {}
        self._raw_post_data = None
        self._parsed = None
        return self
