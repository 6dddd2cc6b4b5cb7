"""Protocol definitions for the transfer engine abstraction."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from ..options import Option


@dataclass(frozen=True)
class TransferResult:
    """
    Immutable outcome of a single transfer.

    Attributes:
        raw_response: Full response text (status line, headers, blank line, body)
        status_code: HTTP status code of the final response
        effective_url: Final URL after any redirects
        request_headers: Raw echo of the request header blocks actually sent
        info: Additional transfer metadata (timings, sizes, redirect count)
    """

    raw_response: str
    status_code: int
    effective_url: str
    request_headers: str = ""
    info: dict[str, Any] = field(default_factory=dict)


class TransferEngine(Protocol):
    """
    Protocol for transfer engines.

    This abstraction allows for:
    - Mock implementations in tests
    - Different backends (requests, a native binding, etc.)
    - A single option vocabulary across backends
    """

    def perform(self, uri: str, options: Mapping[Option, Any]) -> TransferResult:
        """
        Perform one transfer.

        Args:
            uri: The URI to access
            options: Transfer options, including HTTPHEADER and POSTFIELDS

        Returns:
            TransferResult with the raw response and metadata

        Raises:
            TransferError: On any transport failure
        """
        ...
