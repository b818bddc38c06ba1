"""Mint signed URLs for the image server.

Usage::

    image-server-sign-url --get <image-name> <seconds>
    image-server-sign-url --put <image-name> <seconds>
    image-server-sign-url --delete <image-name> <seconds>
    image-server-sign-url --post <seconds>

``SECRET_KEY`` and ``BASE_URL`` are read from the environment or ``.env``.
"""
import argparse
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from image_server.core.config import get_settings
from image_server.core.security import create_signed_url


def _positive_seconds(value: str) -> int:
    try:
        seconds = int(value)
    except ValueError:
        seconds = 0
    if seconds <= 0:
        raise argparse.ArgumentTypeError("time-in-seconds must be a positive number")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="image-server-sign-url",
        description="Generate a signed URL for the image server",
    )
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("-g", "--get", nargs=2, metavar=("IMAGE_NAME", "SECONDS"))
    group.add_argument("-u", "--put", nargs=2, metavar=("IMAGE_NAME", "SECONDS"))
    group.add_argument("-d", "--delete", nargs=2, metavar=("IMAGE_NAME", "SECONDS"))
    group.add_argument("-p", "--post", nargs=1, metavar="SECONDS")
    return parser


def parse_request(argv: Sequence[str] | None = None) -> tuple[str, str | None, int]:
    parser = build_parser()
    args = parser.parse_args(argv)

    filename: str | None
    if args.post:
        method, filename, raw_seconds = "POST", None, args.post[0]
    elif args.get:
        method, (filename, raw_seconds) = "GET", args.get
    elif args.put:
        method, (filename, raw_seconds) = "PUT", args.put
    else:
        method, (filename, raw_seconds) = "DELETE", args.delete

    try:
        seconds = _positive_seconds(raw_seconds)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))
    return method, filename, seconds


def main(argv: Sequence[str] | None = None) -> int:
    method, filename, seconds = parse_request(argv)
    try:
        settings = get_settings()
    except ValidationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1

    print(create_signed_url(settings.secret_key, settings.base_url, method, filename, seconds))
    return 0


if __name__ == "__main__":
    sys.exit(main())
