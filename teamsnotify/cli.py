from __future__ import annotations

import argparse
import logging
from pathlib import Path

from dotenv import load_dotenv

from teamsnotify.client import TeamsClient
from teamsnotify.config import ConfigError, load_config
from teamsnotify.errors import SendError, ValidationError
from teamsnotify.message import MessageCard


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="teamsnotify")
    parser.add_argument("--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    send = sub.add_parser("send", help="Send a message card described by a JSON/YAML file")
    send.add_argument("config", type=Path, help="File with webhookURL, title and text")
    send.add_argument("--webhook-url", default=None, help="Override the webhook URL from the file")
    send.add_argument("--title", default=None)
    send.add_argument("--text", default=None)
    send.add_argument("--color", default=None, help="Accent color, e.g. 0076D7")

    check = sub.add_parser("check-url", help="Check a webhook URL against the approved patterns")
    check.add_argument("url")

    return parser


def _send(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config, webhook_url=args.webhook_url)
    except ConfigError as e:
        logging.error("%s", e)
        return 2

    webhook_url = config["webhook_url"]
    card = MessageCard(
        title=args.title if args.title is not None else config["title"],
        text=args.text if args.text is not None else config["text"],
        color=args.color if args.color is not None else config["color"],
    )

    with TeamsClient() as client:
        try:
            client.send(webhook_url, card)
        except SendError as e:
            logging.error("failed to send message: %s", e)
            return 1

    print(f"Sent to: {webhook_url}\nTitle: {card.title}\nText: {card.text}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    load_dotenv()

    if args.command == "send":
        return _send(args)

    # check-url
    with TeamsClient() as client:
        try:
            client.validate_webhook(args.url)
        except ValidationError as e:
            logging.error("%s", e)
            return 1
    print(f"ok: {args.url}")
    return 0
