"""Splitting of raw HTTP messages into status, headers and body."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ..errors import HeadersNotExtractableError
from .headers import HeaderMap

logger = logging.getLogger(__name__)

CRLF = "\r\n"
BOUNDARY = CRLF + CRLF

STATUS_LINE_PATTERN = re.compile(r"^(HTTP/\d+(?:\.\d+)?) +(\d{3})(?: +(.*))?$")
REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) +(\S+) +(HTTP/\d+(?:\.\d+)?)$")


@dataclass(frozen=True)
class ResponseStatus:
    """
    Parsed HTTP status line.

    Attributes:
        protocol: Protocol version, e.g. "HTTP/1.1"
        code: Numeric status code
        status: Reason phrase, verbatim (may be empty)
    """

    protocol: str
    code: int
    status: str

    def __str__(self) -> str:
        return f"{self.protocol} {self.code} {self.status}".rstrip()


@dataclass(frozen=True)
class ParsedResponse:
    """Result of splitting a raw response."""

    status: ResponseStatus
    headers: HeaderMap
    body: str


def parse_status_line(line: str) -> ResponseStatus | None:
    """Parse ``HTTP/x.y NNN reason``; returns None if the line is not a status line."""
    match = STATUS_LINE_PATTERN.match(line)
    if not match:
        return None
    protocol, code, status = match.groups()
    return ResponseStatus(protocol=protocol, code=int(code), status=status or "")


def parse_header_lines(lines: list[str], headers: HeaderMap | None = None) -> HeaderMap:
    """
    Parse ``Name: value`` lines into a HeaderMap.

    Only the first colon separates name from value. Lines starting with
    whitespace continue the previous header (obsolete line folding). Lines
    without a colon are skipped.

    Args:
        lines: Header lines without their CRLF terminators
        headers: Optional map to add to

    Returns:
        The populated HeaderMap
    """
    if headers is None:
        headers = HeaderMap()
    last_name: str | None = None

    for line in lines:
        if not line:
            continue
        if line[0] in " \t":
            if last_name is not None:
                headers.extend_last(last_name, line.strip())
            continue
        name, sep, value = line.partition(":")
        name = name.strip()
        if not sep or not name:
            logger.debug(f"Skipping malformed header line: {line!r}")
            last_name = None
            continue
        headers.add(name, value.strip())
        last_name = name

    return headers


def split_response(raw: str) -> ParsedResponse:
    """
    Split a raw HTTP response into status, headers and body.

    Only the first blank line separates headers from body; anything after
    it, including further blank lines, is body. Interim 1xx responses
    preceding the final one are skipped.

    Args:
        raw: Raw response text as returned by the transfer engine

    Returns:
        ParsedResponse with status, headers and body

    Raises:
        HeadersNotExtractableError: If there is no header/body boundary or
            the header block does not start with an HTTP status line
    """
    remaining = raw

    while True:
        head, sep, body = remaining.partition(BOUNDARY)
        if not sep:
            raise HeadersNotExtractableError("No header/body boundary found in response")

        lines = head.split(CRLF)
        status = parse_status_line(lines[0])
        if status is None:
            raise HeadersNotExtractableError(f"Response does not start with an HTTP status line: {lines[0][:80]!r}")

        if 100 <= status.code < 200 and parse_status_line(body.split(CRLF, 1)[0]) is not None:
            logger.debug(f"Skipping interim response: {status}")
            remaining = body
            continue

        return ParsedResponse(status=status, headers=parse_header_lines(lines[1:]), body=body)


def parse_request_headers(blob: str) -> HeaderMap:
    """
    Parse the headers of an echoed request.

    The blob holds one or more requests as sent on the wire (request line
    followed by headers, each terminated by a blank line). When redirects
    produced several requests, the headers of the last one are returned.

    Args:
        blob: Raw request header text

    Returns:
        HeaderMap of the headers sent (empty if the blob is empty)
    """
    blocks = [block for block in blob.split(BOUNDARY) if block.strip()]
    if not blocks:
        return HeaderMap()

    lines = blocks[-1].split(CRLF)
    if REQUEST_LINE_PATTERN.match(lines[0]):
        lines = lines[1:]
    return parse_header_lines(lines)
