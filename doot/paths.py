"""Typed relative and absolute path strings."""

from __future__ import annotations

import os


def _clean(path: str) -> str:
    if not path:
        return "."
    cleaned = os.path.normpath(path)
    if os.sep == "/" and cleaned.startswith("//") and not cleaned.startswith("///"):
        cleaned = cleaned[1:]
    return cleaned


def _join(*elements: str) -> str:
    joined = os.sep.join(element for element in elements if element)
    return _clean(joined) if joined else ""


class RelativePath(str):
    """A path relative to some base directory."""

    def __repr__(self) -> str:
        return f"RelativePath({str(self)!r})"

    def make_absolute(self, base_dir: AbsolutePath) -> AbsolutePath:
        return base_dir.joinpath(self)

    def substitute(self, substring: str, replacement: str) -> RelativePath:
        return RelativePath(str(self).replace(substring, replacement))

    def remove_base_dir(self, base_dir_len: int) -> RelativePath:
        return RelativePath(str(self)[base_dir_len:])

    def append_left(self, left: str) -> RelativePath:
        return RelativePath(_join(left, str(self)))

    def top_level_dir(self) -> str:
        head, _, _ = str(self).partition(os.sep)
        return head

    def split_name(self) -> tuple[RelativePath, str]:
        """Split after the last separator; the directory keeps its trailing separator."""
        text = str(self)
        index = text.rfind(os.sep) + 1
        return RelativePath(text[:index]), text[index:]

    def is_hidden(self) -> bool:
        return self.startswith(".")

    def unhide(self) -> RelativePath:
        if not self.is_hidden():
            return self
        return RelativePath(str(self)[1:])

    def parent(self) -> RelativePath:
        return RelativePath(_clean(os.path.dirname(str(self))))


class AbsolutePath(str):
    """A path that must be absolute."""

    def __new__(cls, path: str) -> AbsolutePath:
        if not os.path.isabs(path):
            raise ValueError(f"Attempted to create AbsolutePath from non-absolute path: {path!r}")
        return super().__new__(cls, path)

    def __repr__(self) -> str:
        return f"AbsolutePath({str(self)!r})"

    def joinpath(self, other: str) -> AbsolutePath:
        return AbsolutePath(_join(str(self), str(other)))

    def extract_relative_path(self, base_dir_len: int) -> RelativePath:
        return RelativePath(str(self)[base_dir_len:])

    def parent(self) -> AbsolutePath:
        return AbsolutePath(_clean(os.path.dirname(str(self))))

    def append_extension(self, ext: str) -> AbsolutePath:
        return AbsolutePath(str(self) + ext)


def relative_to_pwd(relative_path: str) -> AbsolutePath:
    """Resolve a path against the current working directory."""
    return AbsolutePath(os.path.abspath(relative_path))