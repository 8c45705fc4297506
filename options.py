"""Resolve command-line arguments, environment and stdin into Options."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Mapping, TextIO

from pydantic import BaseModel, ConfigDict, Field

from errors import ConfigError, InputError

DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_TEMPERATURE = 0.7

API_KEY_ENV = "OPENAI_API_KEY"
LAYOUT_ENV = "SLM_HISTORY_LAYOUT"

# layout -> (relative dir, file name)
HISTORY_LAYOUTS = {
    "xdg": (Path("slm"), "history.ndb"),
    "plan9": (Path("lib", "llm"), "llm.history"),
}
DEFAULT_LAYOUT = "xdg"


class Options(BaseModel):
    """Everything one run needs, assembled once."""

    model_config = ConfigDict(frozen=True)

    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    system_prompt: str = ""
    user_prompt: str
    continue_conversation: bool = False
    api_key: str = Field(repr=False)
    history_path: Path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slm",
        description="Send a prompt to the OpenAI chat completions API and print the reply.",
    )
    parser.add_argument("-m", dest="model", default=DEFAULT_MODEL, help=f"model to use (default: {DEFAULT_MODEL})")
    parser.add_argument(
        "-t",
        dest="temperature",
        type=float,
        default=DEFAULT_TEMPERATURE,
        help=f"temperature (default: {DEFAULT_TEMPERATURE})",
    )
    parser.add_argument("-s", dest="system", default="", help="system prompt")
    parser.add_argument("-c", dest="cont", action="store_true", help="continue the conversation stored in the history file")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging on stderr")
    parser.add_argument("prompt", nargs="?", default=None, help="prompt text (default: read stdin)")
    return parser


def _config_dir(environ: Mapping[str, str]) -> Path:
    xdg = environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    home = environ.get("HOME")
    if home:
        return Path(home, ".config")
    return Path.home() / ".config"


def _plan9_home(environ: Mapping[str, str]) -> Path:
    home = environ.get("home") or environ.get("HOME")
    return Path(home) if home else Path.home()


def history_path(environ: Mapping[str, str]) -> Path:
    """Location of the history file for the layout selected in the environment."""
    layout = environ.get(LAYOUT_ENV) or DEFAULT_LAYOUT
    if layout not in HISTORY_LAYOUTS:
        known = ", ".join(sorted(HISTORY_LAYOUTS))
        raise ConfigError(f"{LAYOUT_ENV}={layout!r} is not one of: {known}")
    subdir, filename = HISTORY_LAYOUTS[layout]
    base = _plan9_home(environ) if layout == "plan9" else _config_dir(environ)
    return base / subdir / filename


def read_prompt(stdin: TextIO) -> str:
    """Consume stdin to EOF. Nothing read so far is kept when reading fails."""
    try:
        return stdin.read()
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"prompt could not be read: {e}") from e


def resolve_options(
    args: argparse.Namespace,
    environ: Mapping[str, str],
    stdin: TextIO,
) -> Options:
    """Build Options from parsed arguments. Raises ConfigError or InputError."""
    api_key = environ.get(API_KEY_ENV)
    if not api_key:
        raise ConfigError(f"{API_KEY_ENV} not set")

    prompt = args.prompt if args.prompt is not None else read_prompt(stdin)
    if not prompt.strip():
        raise ConfigError("empty prompt")

    return Options(
        model=args.model,
        temperature=args.temperature,
        system_prompt=args.system,
        user_prompt=prompt,
        continue_conversation=args.cont,
        api_key=api_key,
        history_path=history_path(environ),
    )
