"""Bget: URI plus transfer options, handed to a transfer engine."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Union

from ..errors import TransferError, TransferErrorCode
from ..models.config import ClientConfig
from ..options import Option
from ..transfer.engine import RequestsEngine
from ..transfer.protocols import TransferEngine, TransferResult

logger = logging.getLogger(__name__)

OptionKey = Union[Option, str]


class Bget:
    """
    A single transfer: a URI, a bag of transfer options, and the raw
    response they produced.

    Options are stored exactly as given and forwarded verbatim to the
    transfer engine on ``execute()``. Setters return the object so calls
    can be chained.

    Example:
        bg = Bget("https://example.com/")
        bg.set_option(Option.USERAGENT, "Better Getter").execute()
        print(bg.get_raw_response())
    """

    def __init__(
        self,
        uri: str | None = None,
        *,
        engine: TransferEngine | None = None,
        config: ClientConfig | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            uri: URI to access
            engine: Transfer engine; a RequestsEngine is created if omitted
            config: Optional defaults to seed the options with
        """
        self._uri = uri
        self._engine: TransferEngine = engine if engine is not None else RequestsEngine()
        self._config = config
        self._options: dict[Option, Any] = dict(config.to_options()) if config else {}
        self._raw_response: str | None = None
        self._result: TransferResult | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._uri!r})"

    def set_uri(self, uri: str | None) -> Bget:
        self._uri = uri
        return self

    def get_uri(self) -> str | None:
        return self._uri

    def _check_option(self, option: Option, value: Any) -> None:
        """Hook for subclasses to refuse options. Must not change state."""

    def _store_option(self, option: Option, value: Any) -> None:
        if option is Option.URL:
            self._uri = value
        elif value is None:
            self._options.pop(option, None)
        else:
            self._options[option] = value

    def set_option(self, option: OptionKey, value: Any) -> Bget:
        """
        Set one transfer option. ``None`` removes it.

        Args:
            option: Option member or name
            value: Value forwarded verbatim to the engine

        Raises:
            ConfigError: If the option is unknown or refused
        """
        option = Option.coerce(option)
        self._check_option(option, value)
        self._store_option(option, value)
        return self

    def set_options(self, options: Mapping[OptionKey, Any]) -> Bget:
        """
        Set several transfer options at once.

        Every option is checked before any is stored, so a refused option
        leaves the client unchanged.

        Raises:
            ConfigError: If any option is unknown or refused
        """
        resolved = [(Option.coerce(key), value) for key, value in options.items()]
        for option, value in resolved:
            self._check_option(option, value)
        for option, value in resolved:
            self._store_option(option, value)
        return self

    def get_option(self, option: OptionKey) -> Any:
        option = Option.coerce(option)
        if option is Option.URL:
            return self._uri
        return self._options.get(option)

    def get_options(self) -> dict[Option, Any]:
        return dict(self._options)

    def _transfer_options(self) -> dict[Option, Any]:
        """Options handed to the engine; subclasses add what they manage."""
        return dict(self._options)

    def execute(self) -> Bget:
        """
        Run the transfer and store its raw response.

        Returns:
            self

        Raises:
            TransferError: If no URI is set or the engine fails
        """
        self._begin_transfer()
        if not self._uri:
            raise TransferError("No URI set", TransferErrorCode.URL_MALFORMAT)

        logger.debug(f"Executing transfer for {self._uri}")
        result = self._engine.perform(self._uri, self._transfer_options())
        self._result = result
        self.set_raw_response(result.raw_response)
        logger.info(f"{self._uri} -> {result.status_code} ({len(result.raw_response)} chars)")
        return self

    def _begin_transfer(self) -> None:
        """Forget the response state of the previous cycle."""
        self._raw_response = None
        self._result = None

    def set_raw_response(self, raw_response: str | None) -> Bget:
        """Replace the stored raw response (e.g. to inject one for testing)."""
        self._raw_response = raw_response
        return self

    def get_raw_response(self) -> str | None:
        return self._raw_response

    def get_info(self, key: str | None = None) -> Any:
        """
        Transfer metadata from the last execution.

        Args:
            key: Single entry to return (e.g. "http_code"); all if omitted

        Returns:
            The entry, a dict of all entries, or None before any execution
        """
        if self._result is None:
            return None
        if key is None:
            return dict(self._result.info)
        return self._result.info.get(key)

    def reset(self) -> Bget:
        """Drop all options and response state; the URI is kept."""
        self._options = dict(self._config.to_options()) if self._config else {}
        self._raw_response = None
        self._result = None
        return self
