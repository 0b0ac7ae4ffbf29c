"""Glob patterns with path separators, compiled to regular expressions."""

from __future__ import annotations

import os
import re

from doot import log

_TEXT_BREAKERS = "[{*?"
_TERM_BREAKERS = _TEXT_BREAKERS + ",}"
_ESCAPE = "\\"


class GlobSyntaxError(ValueError):
    """A glob pattern could not be parsed."""


class _Parser:
    def __init__(self, pattern: str, separator: str) -> None:
        self._pattern = pattern
        self._pos = 0
        self._any_but_sep = f"[^{re.escape(separator)}]" if separator else "."

    def _peek(self, offset: int = 0) -> str | None:
        index = self._pos + offset
        return self._pattern[index] if index < len(self._pattern) else None

    def parse(self) -> str:
        return self._sequence(in_terms=False)

    def _sequence(self, in_terms: bool) -> str:
        parts = []
        while (char := self._peek()) is not None:
            if in_terms and char in ",}":
                break
            if char == "{":
                self._pos += 1
                parts.append(self._terms())
            elif char == "[":
                self._pos += 1
                parts.append(self._range())
            elif char == "?":
                self._pos += 1
                parts.append(self._any_but_sep)
            elif char == "*":
                if self._peek(1) == "*":
                    self._pos += 2
                    parts.append(".*")
                else:
                    self._pos += 1
                    parts.append(self._any_but_sep + "*")
            else:
                breakers = _TERM_BREAKERS if in_terms else _TEXT_BREAKERS
                parts.append(re.escape(self._text(breakers)))
        return "".join(parts)

    def _text(self, breakers: str) -> str:
        chars = []
        while (char := self._peek()) is not None:
            if char == _ESCAPE:
                self._pos += 1
                escaped = self._peek()
                if escaped is None:
                    break
                chars.append(escaped)
                self._pos += 1
                continue
            if char in breakers:
                break
            chars.append(char)
            self._pos += 1
        return "".join(chars)

    def _terms(self) -> str:
        alternatives = [self._sequence(in_terms=True)]
        while True:
            char = self._peek()
            if char is None:
                raise GlobSyntaxError("unexpected end of pattern: unclosed '{'")
            self._pos += 1
            if char == "}":
                return "(?:" + "|".join(alternatives) + ")"
            alternatives.append(self._sequence(in_terms=True))

    def _range(self) -> str:
        negated = False
        if self._peek() == "!":
            negated = True
            self._pos += 1
        first = self._peek()
        if first is None:
            raise GlobSyntaxError("unexpected end of pattern: unclosed '['")

        if self._peek(1) == "-":
            high = self._peek(2)
            if high is None:
                raise GlobSyntaxError("unexpected end of pattern: unclosed '['")
            self._pos += 3
            body = f"{re.escape(first)}-{re.escape(high)}" if first <= high else ""
        else:
            body = "".join(re.escape(char) for char in self._text("]"))

        if self._peek() != "]":
            raise GlobSyntaxError("expected ']' to close character range")
        self._pos += 1

        if not body:
            return "." if negated else "(?!)"
        return "[" + ("^" if negated else "") + body + "]"


def compile_glob(pattern: str, separator: str) -> re.Pattern[str]:
    """Compile a glob where '*' and '?' stop at separator and '**' does not."""
    try:
        return re.compile(_Parser(pattern, separator).parse(), re.DOTALL)
    except re.error as exc:
        raise GlobSyntaxError(str(exc)) from exc


def _preprocess(pattern: str) -> str:
    # '**/' should also match zero directories, so each occurrence becomes optional.
    super_glob = "**" + os.sep
    return pattern.replace(super_glob, "{,**" + os.sep + "}")


class GlobCollection:
    """A set of glob patterns; a path matches if any pattern matches it."""

    def __init__(self, patterns=()) -> None:
        self._globs: list[re.Pattern[str]] = []
        for pattern in patterns:
            try:
                self._globs.append(compile_glob(_preprocess(pattern), os.sep))
            except GlobSyntaxError as exc:
                log.warning("Ignoring invalid glob pattern '%s': %s", pattern, exc)

    def matches(self, path: str) -> bool:
        text = str(path)
        return any(glob.fullmatch(text) for glob in self._globs)

    def __len__(self) -> int:
        return len(self._globs)