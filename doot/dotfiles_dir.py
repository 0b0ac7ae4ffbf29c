"""Locate the dotfiles directory."""

from __future__ import annotations

import os
from pathlib import Path

from doot import log
from doot.constants import ENV_DOOT_DIR, ENV_XDG_DATA_HOME
from doot.paths import AbsolutePath


def _home_dir() -> str:
    try:
        return str(Path.home())
    except RuntimeError as exc:
        raise LookupError(f"error retrieving home directory: {exc}") from exc


def _locate() -> str:
    doot_dir = os.environ.get(ENV_DOOT_DIR, "")
    if doot_dir and os.path.isdir(doot_dir):
        return doot_dir

    home = _home_dir()
    xdg_data_home = os.environ.get(ENV_XDG_DATA_HOME, "") or os.path.join(home, ".local", "share")
    candidates = [os.path.join(xdg_data_home, "dotfiles"), os.path.join(home, ".dotfiles")]
    for candidate in candidates:
        if os.path.isdir(candidate):
            return candidate

    raise LookupError(
        "none of the candidate dotfiles directories exist:\n"
        f"  - $DOOT_DIR = '{doot_dir}'\n"
        f"  - {candidates[0]}\n"
        f"  - {candidates[1]}"
    )


def find_dotfiles_dir() -> AbsolutePath:
    """Return the first existing dotfiles directory among the candidates."""
    try:
        directory = _locate()
    except LookupError as exc:
        log.fatal("Error finding dotfiles directory: %s", exc)
    if not os.path.isabs(directory):
        log.fatal("Dotfiles directory must be an absolute path: %s", directory)
    log.info("Using dotfiles directory: %s", directory)
    return AbsolutePath(directory)