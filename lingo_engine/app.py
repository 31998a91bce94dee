"""
Command-line front-end for the Lingo localization engine.

Reads content from files or arguments, runs it through LocalizationEngine
and writes the localized result to stdout or a file.
"""

from __future__ import annotations

import argparse
import concurrent.futures
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Optional

from lingo_engine.config import AppConfig, config_to_dict, load_config, setup_logging
from lingo_engine.engine import LocalizationEngine
from lingo_engine.errors import CancellationError, LocalizationError
from lingo_engine.models import BatchLocalizationParams, ChatMessage, LocalizationParams
from lingo_engine.ui.display import (
    ChunkProgress,
    console,
    display_chat,
    display_config_summary,
    display_translations,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from lingo_engine.utils.cancellation import CancellationToken

logger = logging.getLogger(__name__)


def create_engine(config: AppConfig) -> LocalizationEngine:
    """
    Create a LocalizationEngine instance.

    Args:
        config: Loaded application configuration

    Returns:
        LocalizationEngine instance
    """
    return LocalizationEngine(config.engine)


def run_cancellable(func: Callable[[CancellationToken], Any], token: CancellationToken) -> Any:
    """
    Run a call on a worker thread so Ctrl-C can cancel it cooperatively.

    Args:
        func: Callable receiving the cancellation token
        token: Token cancelled on KeyboardInterrupt

    Returns:
        The callable's result
    """
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(func, token)
        while True:
            try:
                return future.result(timeout=0.2)
            except concurrent.futures.TimeoutError:
                continue
            except KeyboardInterrupt:
                console.print("\n[yellow]Cancelling...[/]")
                token.cancel()


def _read_text(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def _read_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _write_output(content: str, output: Optional[str]) -> None:
    if output:
        Path(output).write_text(content, encoding="utf-8")
        print_success(f"Saved to: {output}")
    else:
        sys.stdout.write(content)
        if not content.endswith("\n"):
            sys.stdout.write("\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lingo-engine",
        description="Localize text, objects, chats and HTML documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        help="Path to configuration file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    def add_locale_options(sub: argparse.ArgumentParser, multi_target: bool = False) -> None:
        sub.add_argument(
            "--source", "-s",
            default=None,
            help="Source locale (auto-detected when omitted)",
        )
        if multi_target:
            sub.add_argument(
                "--target", "-t",
                action="append",
                required=True,
                help="Target locale (repeat for several)",
            )
        else:
            sub.add_argument(
                "--target", "-t",
                required=True,
                help="Target locale",
            )
        sub.add_argument(
            "--fast",
            action="store_true",
            help="Trade quality for latency",
        )
        sub.add_argument(
            "--output", "-o",
            type=str,
            help="Write the result to this file",
        )

    text_parser = subparsers.add_parser("text", help="Localize a text string")
    text_parser.add_argument("text", help="Text to localize")
    add_locale_options(text_parser, multi_target=True)

    object_parser = subparsers.add_parser("object", help="Localize a JSON object file")
    object_parser.add_argument("path", help="JSON file holding a flat object")
    add_locale_options(object_parser)

    chat_parser = subparsers.add_parser("chat", help="Localize a JSON chat transcript")
    chat_parser.add_argument("path", help="JSON file holding a list of {name, text}")
    add_locale_options(chat_parser)

    html_parser = subparsers.add_parser("html", help="Localize an HTML document")
    html_parser.add_argument("path", help="HTML file")
    add_locale_options(html_parser)

    recognize_parser = subparsers.add_parser("recognize", help="Detect the locale of a text")
    recognize_parser.add_argument("text", help="Text to analyze")

    subparsers.add_parser("config", help="Show the effective configuration")

    return parser


def main(argv: Optional[list] = None) -> int:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        config = load_config(args.config)
        setup_logging(config.logging)

        if args.command == "config":
            display_config_summary(config_to_dict(config))
            return 0

        if getattr(args, "source", "") is None:
            print_info("No source locale given; the provider will detect it")

        token = CancellationToken()
        with create_engine(config) as engine:
            if args.command == "recognize":
                locale = run_cancellable(
                    lambda t: engine.recognize_locale(args.text, cancel_token=t), token
                )
                _write_output(locale, None)
                return 0

            if args.command == "text" and len(args.target) > 1:
                batch_params = BatchLocalizationParams(
                    source_locale=args.source,
                    target_locales=args.target,
                    fast=args.fast,
                )
                texts = run_cancellable(
                    lambda t: engine.batch_localize_text(args.text, batch_params, cancel_token=t),
                    token,
                )
                if args.output:
                    by_locale = dict(zip(args.target, texts))
                    _write_output(json.dumps(by_locale, ensure_ascii=False, indent=2), args.output)
                else:
                    display_translations(args.target, texts)
                return 0

            target = args.target[0] if isinstance(args.target, list) else args.target
            params = LocalizationParams(
                source_locale=args.source,
                target_locale=target,
                fast=args.fast,
            )

            with ChunkProgress(f"Localizing to {target}") as progress:
                if args.command == "text":
                    result = run_cancellable(
                        lambda t: engine.localize_text(args.text, params, progress, t), token
                    )
                    _write_output(result, args.output)

                elif args.command == "object":
                    obj = _read_json(args.path)
                    result = run_cancellable(
                        lambda t: engine.localize_object(obj, params, progress, t), token
                    )
                    _write_output(json.dumps(result, ensure_ascii=False, indent=2), args.output)

                elif args.command == "chat":
                    chat = [ChatMessage.coerce(m) for m in _read_json(args.path)]
                    messages = run_cancellable(
                        lambda t: engine.localize_chat(chat, params, progress, t), token
                    )
                    if len(messages) < len(chat):
                        print_warning(
                            f"{len(chat) - len(messages)} message(s) came back without a translation"
                        )
                    if args.output:
                        _write_output(
                            json.dumps([m.to_dict() for m in messages], ensure_ascii=False, indent=2),
                            args.output,
                        )
                    else:
                        display_chat(messages)

                elif args.command == "html":
                    html = _read_text(args.path)
                    result = run_cancellable(
                        lambda t: engine.localize_html(html, params, progress, t), token
                    )
                    _write_output(result, args.output)

        return 0

    except CancellationError as e:
        print_error(str(e))
        return 130
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/]")
        return 130
    except (LocalizationError, OSError, json.JSONDecodeError) as e:
        print_error(str(e), title="Error")
        logger.debug("Command failed", exc_info=True)
        return 1
