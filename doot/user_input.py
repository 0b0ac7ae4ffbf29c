"""Single-letter prompts with a default answer."""

from __future__ import annotations

import sys
from collections.abc import Callable

_CASE_BIT = ord("a") - ord("A")


def _read_stdin() -> str:
    return sys.stdin.readline()


def _first_upper(options: str) -> str:
    for char in options:
        if "A" <= char <= "Z":
            return char
    raise ValueError(f"No uppercase rune found in {options}")


def _ensure_lower(char: str) -> str:
    return chr(ord(char) | _CASE_BIT)


def request_input(options: str, message: str, reader: Callable[[], str] | None = None) -> str:
    """Ask the user to pick one of the letters in options.

    The uppercase letter in options is the default, used on empty or invalid
    input. Returns the chosen letter in lower case.
    """
    sys.stdout.write(f"{message} [{'/'.join(options)}] ")
    sys.stdout.flush()
    default = _ensure_lower(_first_upper(options))
    words = (reader or _read_stdin)().split()

    if not words:
        print(f"> {default}")
        choice = default
    else:
        choice = _ensure_lower(words[0][0])

    if choice not in options.lower():
        print(f"Invalid response: '{choice}', defaulting to '{default}'")
        choice = default
    return choice