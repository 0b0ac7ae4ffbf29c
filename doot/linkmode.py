"""Ways of installing a dotfile: symbolic links or hard links."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass

from doot import log
from doot.colfer import InstalledFile
from doot.paths import AbsolutePath
from doot.symlinks import dir_entry_is_symlink, is_symlink


class LinkMode(ABC):
    """How links from the target directory to the dotfiles are made and recognised."""

    @abstractmethod
    def create_link(self, dotfiles_source: AbsolutePath, target: AbsolutePath) -> None:
        """Create target as a link to dotfiles_source; raise OSError on failure."""

    @abstractmethod
    def is_installed_link_of(self, maybe_installed_link_path: str, dotfile_path: AbsolutePath) -> bool:
        """Whether the path is a link installed for dotfile_path."""

    @abstractmethod
    def can_be_safely_removed(self, link_path: AbsolutePath, expected_destination_dir: str) -> bool:
        """Whether removing link_path cannot lose user data."""

    @abstractmethod
    def recalculate_cache(self, dotfiles_dir: AbsolutePath, scan_path: str) -> list[InstalledFile]:
        """Scan scan_path for links into dotfiles_dir."""


def _sorted_entries(path: str) -> list[os.DirEntry]:
    try:
        with os.scandir(path) as entries:
            return sorted(entries, key=lambda entry: entry.name)
    except OSError as exc:
        log.warning("Skipping '%s' due to error: %s", path, exc)
        return []


class SymlinkLinkMode(LinkMode):
    """Dotfiles are installed as symbolic links."""

    def create_link(self, dotfiles_source: AbsolutePath, target: AbsolutePath) -> None:
        os.symlink(str(dotfiles_source), str(target))

    def is_installed_link_of(self, maybe_installed_link_path: str, dotfile_path: AbsolutePath) -> bool:
        try:
            info = os.lstat(maybe_installed_link_path)
        except OSError as exc:
            log.info("Failed to stat %s: %s", maybe_installed_link_path, exc)
            return False
        return is_symlink(info) and _read_link_or_fatal(maybe_installed_link_path) == str(dotfile_path)

    def can_be_safely_removed(self, link_path: AbsolutePath, expected_destination_dir: str) -> bool:
        try:
            target = os.readlink(str(link_path))
        except OSError:
            return False
        return target.startswith(expected_destination_dir)

    def recalculate_cache(self, dotfiles_dir: AbsolutePath, scan_path: str) -> list[InstalledFile]:
        return list(self._scan(str(dotfiles_dir), scan_path))

    def _scan(self, dotfiles_dir: str, scan_path: str) -> Iterator[InstalledFile]:
        for entry in _sorted_entries(scan_path):
            entry_path = os.path.join(scan_path, entry.name)
            if entry.is_dir(follow_symlinks=False):
                yield from self._scan(dotfiles_dir, entry_path)
            elif dir_entry_is_symlink(entry):
                try:
                    target = os.readlink(entry_path)
                except OSError as exc:
                    log.warning("Failed to read symlink %s: %s", entry_path, exc)
                    continue
                if target.startswith(dotfiles_dir):
                    yield InstalledFile(path=entry_path, content=target)


def _read_link_or_fatal(link_path: str) -> str:
    try:
        return os.readlink(link_path)
    except OSError as exc:
        log.fatal("Failed to read link %s: %s", link_path, exc)


@dataclass(frozen=True)
class HardlinkId:
    """Identifies a file's inode across all of its names."""

    inode: int
    dev: int


@dataclass(frozen=True)
class _StatResult:
    num_links: int
    hardlink_id: HardlinkId


def _os_stat(path: str) -> _StatResult:
    if os.name == "nt":
        log.fatal("use_hardlinks is not supported on Windows.")
    info = os.lstat(path)
    return _StatResult(info.st_nlink, HardlinkId(info.st_ino, info.st_dev))


def hardlink_id(path: str) -> HardlinkId | None:
    """The inode identity of a file with more than one name, or None."""
    try:
        info = _os_stat(path)
    except OSError as exc:
        log.info("Failed to get hardlink info for %s: %s", path, exc)
        return None
    if info.num_links <= 1:
        return None
    return info.hardlink_id


class HardlinkLinkMode(LinkMode):
    """Dotfiles are installed as hard links."""

    def create_link(self, dotfiles_source: AbsolutePath, target: AbsolutePath) -> None:
        os.link(str(dotfiles_source), str(target))

    def is_installed_link_of(self, maybe_installed_link_path: str, dotfile_path: AbsolutePath) -> bool:
        try:
            first = _os_stat(maybe_installed_link_path)
        except OSError as exc:
            log.info("Failed to stat %s: %s", maybe_installed_link_path, exc)
            return False
        try:
            second = _os_stat(str(dotfile_path))
        except OSError as exc:
            log.info("Failed to stat %s: %s", dotfile_path, exc)
            return False
        return first.hardlink_id == second.hardlink_id

    def can_be_safely_removed(self, link_path: AbsolutePath, expected_destination_dir: str) -> bool:
        # A hard link is only another name for an inode; without storing the inode in the
        # cache there is no way to tell whether it is still the one installed.
        return True

    def recalculate_cache(self, dotfiles_dir: AbsolutePath, scan_path: str) -> list[InstalledFile]:
        known: dict[HardlinkId, str] = {}
        self._collect(known, str(dotfiles_dir))
        return list(self._scan(known, scan_path))

    def _collect(self, known: dict[HardlinkId, str], directory: str) -> None:
        for entry in _sorted_entries(directory):
            entry_path = os.path.join(directory, entry.name)
            if entry.is_dir(follow_symlinks=False):
                self._collect(known, entry_path)
            else:
                identity = hardlink_id(entry_path)
                if identity is not None:
                    known[identity] = entry_path

    def _scan(self, known: dict[HardlinkId, str], scan_path: str) -> Iterator[InstalledFile]:
        for entry in _sorted_entries(scan_path):
            entry_path = os.path.join(scan_path, entry.name)
            if entry.is_dir(follow_symlinks=False):
                yield from self._scan(known, entry_path)
                continue
            identity = hardlink_id(entry_path)
            if identity is None:
                continue
            dotfile_path = known.get(identity)
            if dotfile_path is not None:
                yield InstalledFile(path=entry_path, content=dotfile_path)


def get_link_mode(config) -> LinkMode:
    """The link mode selected by the configuration."""
    if config.use_hardlinks:
        return HardlinkLinkMode()
    return SymlinkLinkMode()