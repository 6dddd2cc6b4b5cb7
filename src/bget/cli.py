"""Command-line interface for bget."""

import argparse
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape

from . import __version__
from .core import BgetHttp
from .errors import ConfigError, ConfigErrorCode, HttpError, TransferError
from .logging_config import setup_logging
from .models.config import ClientConfig
from .options import Option

EXIT_CONFIG_ERROR = 2
EXIT_HTTP_ERROR = 1


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="bget",
        description="Better Getter: fetch a URL and show the HTTP response",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Fetch a page and print the body
  bget https://example.com/

  # Show status line and headers too
  bget -i https://example.com/

  # Multipart POST with a file upload
  bget https://example.com/upload -F name=value -F file=@report.pdf

  # Raw POST body with a custom header
  bget https://example.com/api -H "Content-Type: application/json" -d '{"a": 1}'
        """,
    )

    parser.add_argument("url", help="URL to fetch")
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        metavar="FILE",
        help="Load defaults from a YAML or JSON file",
    )

    # Request
    request_group = parser.add_argument_group("request")
    request_group.add_argument("--request", "-X", metavar="METHOD", help="Request method to use")
    request_group.add_argument(
        "--header",
        "-H",
        action="append",
        default=[],
        metavar="'NAME: VALUE'",
        help="Extra request header (repeatable; 'NAME:' suppresses a header)",
    )
    request_group.add_argument(
        "--form",
        "-F",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Multipart POST field (repeatable; NAME=@path uploads a file)",
    )
    request_group.add_argument("--data", "-d", metavar="DATA", help="Raw POST body (@path reads a file)")
    request_group.add_argument("--user-agent", "-A", metavar="AGENT", help="User-Agent string")
    request_group.add_argument("--user", "-u", metavar="USER:PASSWORD", help="Basic auth credentials")
    request_group.add_argument("--head", "-I", action="store_true", help="Fetch headers only")

    # Network settings
    network_group = parser.add_argument_group("network settings")
    network_group.add_argument("--proxy", "-x", metavar="URL", help="Proxy URL")
    network_group.add_argument("--location", "-L", action="store_true", help="Follow redirects")
    network_group.add_argument("--max-redirs", type=int, default=None, metavar="NUM", help="Maximum redirects")
    network_group.add_argument("--max-time", "-m", type=float, default=None, metavar="SECONDS", help="Total timeout")
    network_group.add_argument(
        "--connect-timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Connection timeout",
    )
    network_group.add_argument("--insecure", "-k", action="store_true", help="Skip TLS certificate verification")

    # Output control
    output_group = parser.add_argument_group("output control")
    output_group.add_argument("--include", "-i", action="store_true", help="Show status line and response headers")
    output_group.add_argument("--verbose", "-v", action="store_true", help="Show the request headers sent")
    output_group.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Logging level (default: from config, else WARNING)",
    )

    return parser


def _split_pair(text: str, separator: str, what: str) -> tuple[str, str]:
    name, sep, value = text.partition(separator)
    if not sep or not name.strip():
        raise ConfigError(f"Invalid {what}: {text!r}", ConfigErrorCode.INVALID_CONFIG)
    return name.strip(), value.strip()


def build_client(args: argparse.Namespace, config: ClientConfig) -> BgetHttp:
    """
    Build an HTTP client from parsed arguments.

    Args:
        args: Parsed command-line arguments
        config: Defaults, overridden by the arguments

    Returns:
        Configured BgetHttp ready to execute

    Raises:
        ConfigError: If a header, form field or option is invalid
    """
    bg = BgetHttp(args.url, config=config)

    options: dict[Option, object] = {}
    if args.request:
        options[Option.CUSTOMREQUEST] = args.request
    if args.user_agent:
        options[Option.USERAGENT] = args.user_agent
    if args.user:
        options[Option.USERPWD] = args.user
    if args.head:
        options[Option.NOBODY] = True
    if args.proxy:
        options[Option.PROXY] = args.proxy
    if args.location:
        options[Option.FOLLOWLOCATION] = True
    if args.max_redirs is not None:
        options[Option.MAXREDIRS] = args.max_redirs
    if args.max_time is not None:
        options[Option.TIMEOUT] = args.max_time
    if args.connect_timeout is not None:
        options[Option.CONNECTTIMEOUT] = args.connect_timeout
    if args.insecure:
        options[Option.SSL_VERIFYPEER] = False
    bg.set_options(options)

    declared: set[str] = set()
    for header in args.header:
        name, value = _split_pair(header, ":", "header")
        # Command-line headers replace config defaults, then accumulate
        if name.lower() in declared:
            bg.add_request_header(name, value)
        else:
            bg.set_request_header(name, value)
            declared.add(name.lower())

    for field in args.form:
        name, value = _split_pair(field, "=", "form field")
        bg.set_post_field(name, Path(value[1:]) if value.startswith("@") else value)

    if args.data is not None:
        data = args.data
        if data.startswith("@"):
            data = Path(data[1:]).read_text()
        bg.set_raw_post_data(data)

    return bg


def print_response(bg: BgetHttp, args: argparse.Namespace, console: Console, err_console: Console) -> None:
    """Print request headers, status, response headers and body as requested."""
    if args.verbose:
        for name, values in bg.get_request_headers().items():
            for value in values:
                err_console.print(f"> {name}: {value}", markup=False, highlight=False, soft_wrap=True)
        err_console.print(">", markup=False, highlight=False)

    if args.include or args.head:
        status = bg.get_response_status()
        console.print(str(status), style="bold", markup=False, highlight=False, soft_wrap=True)
        for line in bg.get_response_headers().lines():
            console.print(line, markup=False, highlight=False, soft_wrap=True)
        console.print()

    body = bg.get_response_body()
    if body:
        sys.stdout.write(body)
        sys.stdout.flush()


def run_request(args: argparse.Namespace) -> int:
    """Run a single request with given arguments."""
    console = Console()
    err_console = Console(stderr=True)

    try:
        config = ClientConfig.from_file(args.config) if args.config else ClientConfig()
    except (ConfigError, FileNotFoundError, ImportError) as e:
        err_console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        return EXIT_CONFIG_ERROR

    level = args.log_level or config.log_level
    setup_logging(level=level, include_transport=level == "DEBUG")

    try:
        bg = build_client(args, config)
        bg.execute()
    except ConfigError as e:
        err_console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        return EXIT_CONFIG_ERROR
    except OSError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        return EXIT_CONFIG_ERROR
    except TransferError as e:
        err_console.print(f"[red]Transfer failed ({int(e.code)}):[/red] {escape(str(e))}")
        return int(e.code)
    except HttpError as e:
        err_console.print(f"[red]Invalid response:[/red] {escape(str(e))}")
        return EXIT_HTTP_ERROR

    print_response(bg, args, console, err_console)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    return run_request(args)


if __name__ == "__main__":
    sys.exit(main())
