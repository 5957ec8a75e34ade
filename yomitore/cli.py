#!/usr/bin/env python3
"""
yomitore CLI - summary training from the terminal

Usage:
    yomitore train [--chars 400]
    yomitore report
    yomitore login [--api-key KEY]
    yomitore config
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from typing import Optional

import yaml

from yomitore.config import YomitoreConfig, get_config, load_api_key, save_api_key
from yomitore.exceptions import ApiError, InvalidApiKeyError, YomitoreError
from yomitore.llm_client import ChatClient
from yomitore.reports import render_buddy, render_report
from yomitore.session import TrainingSession
from yomitore.tracker.progress_tracker import ProgressTracker

logger = logging.getLogger(__name__)

SUMMARY_TERMINATOR = "."


def _client_for(config: YomitoreConfig, api_key: str) -> ChatClient:
    return ChatClient(
        api_key=api_key,
        base_url=config.api_base_url,
        model=config.chat_model,
        timeout=config.request_timeout,
    )


def authenticate(config: YomitoreConfig) -> ChatClient:
    """
    Build a client from the stored key, falling back to GROQ_API_KEY.

    A key taken from the environment is stored once it validates.

    Raises:
        InvalidApiKeyError: If no candidate key validates.
    """
    stored = load_api_key(config)
    if stored:
        client = _client_for(config, stored)
        try:
            client.validate_credentials()
            return client
        except ApiError as e:
            logger.warning(f"Stored API key rejected: {e.message}")

    if config.api_key:
        client = _client_for(config, config.api_key)
        client.validate_credentials()
        try:
            save_api_key(config, config.api_key)
        except OSError as e:
            logger.warning(f"Could not store API key: {e}")
        return client

    raise InvalidApiKeyError()


def read_summary() -> Optional[str]:
    """Read a multi-line summary from stdin, ended by a lone '.' or EOF."""
    print(f"\nWrite your summary. End with a line containing only '{SUMMARY_TERMINATOR}'.")
    lines = []
    for line in sys.stdin:
        if line.rstrip("\n") == SUMMARY_TERMINATOR:
            break
        lines.append(line.rstrip("\n"))
    text = "\n".join(lines).strip()
    return text or None


def cmd_train(config: YomitoreConfig, args: argparse.Namespace) -> int:
    client = authenticate(config)
    session = TrainingSession(
        client,
        ProgressTracker(config.data_dir),
        character_count=args.chars,
    )
    print(render_buddy(session.stats))

    while True:
        print("\nGenerating text...")
        try:
            print("\n" + session.next_text())
        except ApiError as e:
            print(f"Failed to generate text: {e.message}")
            return 1

        summary = read_summary()
        if summary is None:
            break

        print("\nEvaluating your summary...")
        try:
            outcome = session.evaluate(summary)
        except ApiError as e:
            print(f"Error: {e.message}")
            continue

        print("\n" + outcome.display_text)
        for badge in outcome.new_badges:
            print(f"New badge! {badge.icon} {badge.display_text}")
        if outcome.leveled_up:
            print(f"Your buddy reached level {session.stats.buddy.level}!")
        if outcome.save_warning:
            print(outcome.save_warning)

        answer = input("\nNext text? [Y/n] ").strip().lower()
        if answer.startswith("n"):
            break

    return 0


def cmd_report(config: YomitoreConfig, args: argparse.Namespace) -> int:
    stats = ProgressTracker(config.data_dir).load()
    print(
        render_report(
            stats,
            days=config.report_days,
            weeks=config.report_weeks,
            summary_days=config.summary_days,
        )
    )
    return 0


def cmd_login(config: YomitoreConfig, args: argparse.Namespace) -> int:
    api_key = args.api_key or getpass.getpass("API key: ").strip()
    if not api_key:
        print("No API key given.")
        return 1
    _client_for(config, api_key).validate_credentials()
    save_api_key(config, api_key)
    print("API key saved.")
    return 0


def cmd_config(config: YomitoreConfig, args: argparse.Namespace) -> int:
    print(yaml.safe_dump(config.to_dict(), sort_keys=False, allow_unicode=True))
    return 0


def build_parser(config: YomitoreConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="yomitore",
        description="Reading-comprehension trainer: read, summarize, get graded",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    train = subparsers.add_parser("train", help="Start a training session")
    train.add_argument(
        "--chars",
        type=int,
        choices=config.character_count_options,
        default=config.default_character_count,
        help="Approximate length of the practice text",
    )
    train.set_defaults(func=cmd_train)

    report = subparsers.add_parser("report", help="Show progress report")
    report.set_defaults(func=cmd_report)

    login = subparsers.add_parser("login", help="Validate and store an API key")
    login.add_argument("--api-key", help="API key (prompted for if omitted)")
    login.set_defaults(func=cmd_login)

    show = subparsers.add_parser("config", help="Show effective configuration")
    show.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    config = get_config()
    parser = build_parser(config)
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else getattr(logging, config.log_level, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(message)s")

    try:
        return args.func(config, args)
    except InvalidApiKeyError:
        print("Invalid API key. Run 'yomitore login' or set GROQ_API_KEY.")
        return 1
    except YomitoreError as e:
        print(f"Error: {e.message}")
        return 1
    except KeyboardInterrupt:
        print()
        return 130


if __name__ == "__main__":
    sys.exit(main())
