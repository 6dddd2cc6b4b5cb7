"""Transfer option names understood by bget engines."""

from __future__ import annotations

from enum import Enum
from typing import Union

from .errors import ConfigError, ConfigErrorCode


class Option(str, Enum):
    """
    Transfer options, named after the native transfer library's vocabulary.

    Values are passed to the engine verbatim; each engine decides how to
    honour them.
    """

    URL = "url"
    USERAGENT = "useragent"
    AUTOREFERER = "autoreferer"
    USERPWD = "userpwd"
    HTTPPROXYTUNNEL = "httpproxytunnel"
    PROXY = "proxy"
    PROXYUSERPWD = "proxyuserpwd"
    TIMEOUT = "timeout"
    CONNECTTIMEOUT = "connecttimeout"
    FOLLOWLOCATION = "followlocation"
    MAXREDIRS = "maxredirs"
    SSL_VERIFYPEER = "ssl_verifypeer"
    CAINFO = "cainfo"
    SSLCERT = "sslcert"
    COOKIE = "cookie"
    REFERER = "referer"
    ENCODING = "encoding"
    CUSTOMREQUEST = "customrequest"
    NOBODY = "nobody"
    POST = "post"
    HTTPGET = "httpget"
    HTTPHEADER = "httpheader"
    POSTFIELDS = "postfields"

    @classmethod
    def coerce(cls, value: Union["Option", str]) -> "Option":
        """
        Resolve an option from an ``Option`` member or its name.

        Args:
            value: Option member, or its name/value in any case

        Returns:
            The matching Option

        Raises:
            ConfigError: If no option has that name
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ConfigError(f"Unknown transfer option: {value!r}", ConfigErrorCode.UNKNOWN_OPTION)
