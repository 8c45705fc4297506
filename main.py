#!/usr/bin/env python3
"""CLI entry point: load_dotenv, argparse, resolve options, run_once; the only place that sets the exit status."""

from __future__ import annotations

import logging
import os
import sys
from typing import Callable, Sequence, TextIO

from dotenv import load_dotenv
from openai import OpenAI

from chat_cli import run_once
from errors import SlmError
from openai_client import make_client
from options import build_parser, resolve_options


def main(
    argv: Sequence[str] | None = None,
    *,
    client_factory: Callable[[str], OpenAI] = make_client,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        options = resolve_options(args, os.environ, stdin if stdin is not None else sys.stdin)
        run_once(options, client_factory(options.api_key), out=stdout)
    except SlmError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
