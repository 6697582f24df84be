#!/usr/bin/env python3
"""
app.py

Interactive front end for the bucketed hash map:
- prompts for a key line, then a value line (parsed like ``atoi``)
- stores the integer under the key and dumps the whole table after each pair
- ends cleanly on end of input and tears the map down exactly once

Extras:
  * --json prints each dump as a JSON snapshot instead of the indented listing
  * --trace prints the chain walk each update is about to perform
  * TOML config (--config / HASHCHAIN_CONFIG) plus HASHCHAIN_* env overrides
  * text or JSON logs on stderr, optional rotating log file

Exit codes: 0 on end of input, 1 when the map cannot be allocated (stdout stays
empty; a one-line JSON error envelope goes to stderr), 2 for bad config or flags,
3 when the final chain check fails, 5 when the config file cannot be read.
"""

from __future__ import annotations

import argparse
import contextlib
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Any

from hashchain.cli.repl import run_repl
from hashchain.config import CONFIG_ENV, AppConfig, load_app_config
from hashchain.contracts.error import Exit, guard_cli
from hashchain.core.maps import ChainedHashMap

# --------------------------------------------------------------------
# Logging
# --------------------------------------------------------------------
logger = logging.getLogger("hashchain")
logger.setLevel(logging.INFO)
logger.propagate = False

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"
DEFAULT_LOG_MAX_BYTES = 5_000_000
DEFAULT_LOG_BACKUP_COUNT = 5
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class JsonFormatter(logging.Formatter):
    """Render log records as JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, DEFAULT_LOG_DATEFMT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(
    use_json: bool = False,
    log_file: str | None = None,
    *,
    level: str = "INFO",
    max_bytes: int = DEFAULT_LOG_MAX_BYTES,
    backup_count: int = DEFAULT_LOG_BACKUP_COUNT,
) -> None:
    """Configure stderr (and optional rotating file) logging."""

    formatter: logging.Formatter
    if use_json:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(DEFAULT_LOG_FORMAT, DEFAULT_LOG_DATEFMT)

    for handler in list(logger.handlers):
        with contextlib.suppress(Exception):
            handler.close()
        logger.removeHandler(handler)

    logger.setLevel(level)

    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    logger.addHandler(stream)

    if log_file:
        handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
        handler.setFormatter(formatter)
        logger.addHandler(handler)


configure_logging()


def release_value(value: Any) -> None:
    """Destructor registered for REPL values; the map calls it once per dropped value."""

    logger.debug("Released value %r", value)


def build_map(cfg: AppConfig) -> ChainedHashMap:
    hash_map = ChainedHashMap(cfg.map.buckets, max_key_length=cfg.map.max_key_length)
    hash_map.set_destructor(release_value)
    return hash_map


# --------------------------------------------------------------------
# CLI
# --------------------------------------------------------------------
def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="hashchain",
        description=(
            "Interactive key/value shell over a fixed-size chained hash map. "
            "Reads a key line, then a value line, and dumps the table after each pair."
        ),
        epilog=(
            "Exit status 1 means the map could not be allocated: nothing is printed to "
            "stdout and a one-line JSON error envelope is written to stderr."
        ),
    )
    p.add_argument(
        "--buckets",
        type=int,
        default=None,
        help="Bucket count (overrides config; default 2)",
    )
    p.add_argument(
        "--config",
        default=None,
        help=f"Path to TOML config file (falls back to ${CONFIG_ENV})",
    )
    p.add_argument("--json", action="store_true", help="Dump the table as JSON after each update")
    p.add_argument("--trace", action="store_true", help="Print the chain walk for each update")
    p.add_argument("--log-json", action="store_true", help="Emit logs in JSON format")
    p.add_argument(
        "--log-level",
        default="INFO",
        choices=LOG_LEVELS,
        help="Logger threshold (default: %(default)s)",
    )
    p.add_argument(
        "--log-file",
        default=None,
        help="Optional log file path (rotates at 5MB, keeps 5 backups by default)",
    )
    p.add_argument(
        "--log-max-bytes",
        type=int,
        default=DEFAULT_LOG_MAX_BYTES,
        help="Max bytes per log file before rotation (default: %(default)s)",
    )
    p.add_argument(
        "--log-backup-count",
        type=int,
        default=DEFAULT_LOG_BACKUP_COUNT,
        help="Number of rotated log files to keep (default: %(default)s)",
    )
    return p


@guard_cli
def _run(args: argparse.Namespace) -> int:
    cfg_path = args.config or os.getenv(CONFIG_ENV)
    cfg = load_app_config(cfg_path)
    if cfg_path:
        logger.info("Loaded config from %s", cfg_path)
    if args.buckets is not None:
        cfg.map.buckets = args.buckets
        cfg.validate()

    hash_map = build_map(cfg)
    try:
        applied = run_repl(hash_map, policy=cfg.repl, trace=args.trace, json_dump=args.json)
        entries = hash_map.verify()
        logger.debug("Session applied %d updates; %d entries verified", applied, entries)
    finally:
        hash_map.destroy()
    return int(Exit.OK)


def main(argv: list[str]) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(
        args.log_json,
        args.log_file,
        level=args.log_level,
        max_bytes=args.log_max_bytes,
        backup_count=args.log_backup_count,
    )
    return _run(args)


def console_main() -> None:
    """Entry point for console_scripts."""

    try:
        raise SystemExit(main(sys.argv[1:]))
    except SystemExit:
        raise
    except Exception as e:  # noqa: BLE001
        logger.exception("Fatal error: %s", e)
        raise SystemExit(2) from e


if __name__ == "__main__":
    console_main()
