from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Sequence

from dotenv import load_dotenv

from .client import ConfigurationError, ConnectivityError, TautulliClient
from .config import Config
from .formatting import print_table
from .sessions import extract_activity

logger = logging.getLogger(__name__)

NO_ACTIVE_STREAMS = "No active streams."

LICENSE_TEXT = """\
This is free and unencumbered software released into the public domain.

Anyone is free to copy, modify, publish, use, compile, sell, or
distribute this software, either in source code form or as a compiled
binary, for any purpose, commercial or non-commercial, and by any
means.

In jurisdictions that recognize copyright laws, the author or authors
of this software dedicate any and all copyright interest in the
software to the public domain. We make this dedication for the benefit
of the public at large and to the detriment of our heirs and
successors. We intend this dedication to be an overt act of
relinquishment in perpetuity of all present and future rights to this
software under copyright law.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT.
IN NO EVENT SHALL THE AUTHORS BE LIABLE FOR ANY CLAIM, DAMAGES OR
OTHER LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE,
ARISING FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR
OTHER DEALINGS IN THE SOFTWARE.

For more information, please refer to <https://unlicense.org>"""


def setup_logging(level: str = "WARNING") -> None:
    """Configure logging for the CLI.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Can be set via TAUTULLI_LOG_LEVEL environment variable.
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()

    # Only configure if not already configured
    if not root_logger.handlers:
        if numeric_level == logging.DEBUG:
            log_format = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
        else:
            log_format = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"

        logging.basicConfig(
            level=numeric_level,
            format=log_format,
            datefmt="%Y-%m-%d %H:%M:%S",
            stream=sys.stderr,
        )

    for logger_name in ("tautulli_status", "__main__"):
        logging.getLogger(logger_name).setLevel(numeric_level)

    # urllib3 logs full request URLs, which carry the API key
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logger.debug("Debug logging is enabled")


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="tautulli-status",
        description="Show active Tautulli streams as a table.",
        epilog=(
            "Columns: TT = transcoded/throttled flags, ST = state (pl=playing, pa=paused). "
            "Connection settings come from TAUTULLI_URL, TAUTULLI_PORT, TAUTULLI_API_KEY "
            "and TAUTULLI_TIMEOUT (a .env file is read if present)."
        ),
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "-d",
        dest="debug",
        action="store_true",
        help="echo the raw response and parsed sessions before the table",
    )
    group.add_argument(
        "-l",
        dest="license",
        action="store_true",
        help="print the license and exit",
    )
    return parser


def run(config: Config) -> int:
    client = TautulliClient.from_config(config)
    body = client.fetch_activity()
    if config.debug:
        print(body.decode("utf-8", errors="replace"))

    activity = extract_activity(body)
    if config.debug:
        print(activity.to_json())

    if activity.is_idle:
        print(NO_ACTIVE_STREAMS)
        return 0

    print_table(activity.sessions)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()

    args = build_parser().parse_args(argv)

    if args.license:
        print(LICENSE_TEXT)
        return 0

    log_level = "DEBUG" if args.debug else os.getenv("TAUTULLI_LOG_LEVEL", "WARNING")
    setup_logging(log_level)

    try:
        config = Config.from_env(debug=args.debug)
    except ConfigurationError as e:
        logger.debug("Configuration error: %s", e)
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    try:
        return run(config)
    except ConnectivityError as e:
        logger.debug("Activity fetch failed: %s", e)
        print(f"Unable to get activity from Tautulli: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
