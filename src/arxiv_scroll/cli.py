"""CLI/bootstrap helpers for the arxiv-scroll application."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import logging.handlers
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from arxiv_scroll.action_messages import build_actionable_error
from arxiv_scroll.config import (
    CONFIG_APP_NAME,
    coerce_batch_size,
    coerce_request_timeout,
    load_config,
)
from arxiv_scroll.models import (
    MAX_BATCH_SIZE,
    MAX_REQUEST_TIMEOUT,
    MIN_REQUEST_TIMEOUT,
    SORT_BY_OPTIONS,
    SORT_ORDER_OPTIONS,
    UserConfig,
)
from arxiv_scroll.preferences import MemoryStorage, PreferenceStore
from arxiv_scroll.proxy import handle_proxy_request

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool) -> None:
    """Configure logging. When debug=True, logs to file at DEBUG level."""
    if not debug:
        # Default: suppress all logging (TUI captures stderr)
        logging.disable(logging.CRITICAL)
        return

    log_dir = Path(user_config_dir(CONFIG_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "debug.log"

    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.DEBUG)


def _validate_interactive_tty() -> bool:
    """Return True when stdin/stdout are interactive terminals."""
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _apply_overrides(args: argparse.Namespace, config: UserConfig) -> UserConfig:
    """Fold per-run CLI flags into the loaded config."""
    if args.batch_size is not None:
        config.batch_size = coerce_batch_size(args.batch_size)
    if args.timeout is not None:
        config.request_timeout_seconds = coerce_request_timeout(args.timeout)
    if args.sort_by is not None:
        config.sort_by = args.sort_by
    if args.sort_order is not None:
        config.sort_order = args.sort_order
    return config


def _build_proxy_params(args: argparse.Namespace, config: UserConfig) -> dict[str, str]:
    params = {
        "start": str(args.start),
        "maxResults": str(config.batch_size),
        "sortBy": config.sort_by,
        "sortOrder": config.sort_order,
    }
    categories = args.category or config.default_categories
    if categories:
        params["subcategories"] = ",".join(categories)
    if args.query:
        params["query"] = args.query
    return params


def _run_json_mode(args: argparse.Namespace, config: UserConfig) -> int:
    """Print one page of the proxy payload as JSON."""
    params = _build_proxy_params(args, config)
    payload = asyncio.run(
        handle_proxy_request(
            params,
            retry=args.retry,
            timeout_seconds=config.request_timeout_seconds,
        )
    )
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    if payload.get("error") and not payload.get("usedFallback"):
        print(
            build_actionable_error(
                "fetch papers from arXiv",
                why=str(payload.get("message") or payload["error"]),
                next_step="check your network connection or retry with --retry",
            ),
            file=sys.stderr,
        )
        return 1
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Scroll through recent arXiv papers in a TUI, saving and liking as you go"
    )
    parser.add_argument(
        "-q",
        "--query",
        type=str,
        default="",
        help="Initial title search text",
    )
    parser.add_argument(
        "-c",
        "--category",
        action="append",
        default=None,
        help="Category filter, friendly tag (ml, cv, nlp) or code (cs.LG). Repeatable",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help=f"Papers per request (1-{MAX_BATCH_SIZE}; default: config value)",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=None,
        help=(
            f"Per-request timeout in seconds ({MIN_REQUEST_TIMEOUT}-{MAX_REQUEST_TIMEOUT}; "
            "default: config value)"
        ),
    )
    parser.add_argument("--sort-by", choices=SORT_BY_OPTIONS, default=None)
    parser.add_argument("--sort-order", choices=SORT_ORDER_OPTIONS, default=None)
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print one page as JSON and exit instead of starting the UI",
    )
    parser.add_argument(
        "--start",
        type=int,
        default=0,
        help="Result offset for --json mode",
    )
    parser.add_argument(
        "--retry",
        action="store_true",
        help="In --json mode, retry failures and fall back to sample papers",
    )
    parser.add_argument(
        "--no-persist",
        action="store_true",
        help="Keep saved/liked papers and category choices in memory only for this session",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to file (~/.config/arxiv-scroll/debug.log)",
    )
    return parser


def main(
    argv: list[str] | None = None,
    *,
    load_config_fn: Callable[[], UserConfig] = load_config,
    configure_logging_fn: Callable[[bool], None] = _configure_logging,
    validate_interactive_tty_fn: Callable[[], bool] = _validate_interactive_tty,
    app_factory: Callable[..., Any] | None = None,
) -> int:
    """Main entry point. Returns exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.start < 0:
        print("Error: --start must be >= 0", file=sys.stderr)
        return 1

    configure_logging_fn(args.debug)
    logger.debug("arxiv-scroll starting, argv=%s", argv)

    config = _apply_overrides(args, load_config_fn())

    if args.json:
        return _run_json_mode(args, config)

    if not validate_interactive_tty_fn():
        print(
            "Error: arxiv-scroll requires an interactive TTY for the full UI.",
            file=sys.stderr,
        )
        print("Next steps:", file=sys.stderr)
        print("  - Run arxiv-scroll directly in a terminal session", file=sys.stderr)
        print("  - Use --json for non-interactive output", file=sys.stderr)
        print("  - Use --help for command documentation", file=sys.stderr)
        return 2

    store = PreferenceStore.open(MemoryStorage() if args.no_persist else None)

    if app_factory is None:
        from arxiv_scroll.app import PaperScrollApp as _PaperScrollApp

        app_factory = _PaperScrollApp

    app = app_factory(
        config,
        store=store,
        search_text=args.query,
        categories=args.category,
        persist_config=not args.no_persist,
    )
    app.run()
    return 0


__all__ = [
    "_apply_overrides",
    "_build_proxy_params",
    "_configure_logging",
    "_validate_interactive_tty",
    "main",
]
