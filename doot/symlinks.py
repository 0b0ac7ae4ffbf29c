"""Helpers to recognise symbolic links."""

from __future__ import annotations

import os
import stat


def is_symlink(stat_result: os.stat_result) -> bool:
    """Whether an lstat result describes a symbolic link."""
    return stat.S_ISLNK(stat_result.st_mode)


def dir_entry_is_symlink(entry: os.DirEntry) -> bool:
    """Whether a directory entry is a symbolic link."""
    return entry.is_symlink()


def is_symlink_with_target(path: str, expected_target: str) -> bool:
    """Whether path is a symbolic link whose content equals expected_target."""
    try:
        return os.readlink(path) == expected_target
    except OSError:
        return False