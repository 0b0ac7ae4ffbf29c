"""File operations used while installing dotfiles."""

from __future__ import annotations

import os
import shutil
import stat

from doot import log
from doot.constants import DOOT_BACKUP_EXT
from doot.linkmode import LinkMode
from doot.paths import AbsolutePath
from doot.symlinks import is_symlink


def _remove(path: str) -> None:
    if os.path.isdir(path) and not os.path.islink(path):
        os.rmdir(path)
    else:
        os.remove(path)


def replace_with_link(target: AbsolutePath, dotfiles_source: AbsolutePath, link_mode: LinkMode) -> None:
    """Atomically replace target with a link to dotfiles_source."""
    temp_location = AbsolutePath(str(target)).append_extension(DOOT_BACKUP_EXT)
    try:
        _remove(temp_location)
    except FileNotFoundError:
        pass
    except OSError as exc:
        log.error("Failed to remove temporary file %s, consider removing it manually.\n%s", temp_location, exc)
        raise

    try:
        link_mode.create_link(dotfiles_source, temp_location)
    except OSError as exc:
        log.error("Failed to create link %s -> %s: %s", temp_location, dotfiles_source, exc)
        raise

    try:
        os.replace(temp_location, str(target))
    except OSError as exc:
        log.error("Failed to update %s: %s", target, exc)
        try:
            _remove(temp_location)
        except OSError:
            pass
        raise


def adopt_changes(target: AbsolutePath, dotfiles_source: AbsolutePath, link_mode: LinkMode) -> None:
    """Copy target into the dotfiles directory, then replace target with a link to it."""
    log.info("Adding changes from %s into %s", target, dotfiles_source)
    try:
        copy_file(str(target), str(dotfiles_source), True)
    except OSError as exc:
        log.error("Failed to copy file %s to %s: %s", target, dotfiles_source, exc)
        raise
    replace_with_link(target, dotfiles_source, link_mode)


def remove_and_cleanup(remove_file: AbsolutePath, stop_at: AbsolutePath) -> bool:
    """Remove a file and any directories it leaves empty, up to stop_at."""
    try:
        _remove(str(remove_file))
    except FileNotFoundError:
        log.info("Link %s does not exist, it may have been removed manually", remove_file)
        return False
    except OSError as exc:
        log.error("Failed to remove %s: %s", remove_file, exc)
        return False
    cleanup_empty_dir(AbsolutePath(str(remove_file)).parent(), stop_at)
    return True


def cleanup_empty_dir(directory: AbsolutePath, stop_at: AbsolutePath) -> None:
    """Remove directory and its ancestors while they are empty, stopping at stop_at."""
    current = AbsolutePath(str(directory))
    while str(current) != str(stop_at):
        try:
            with os.scandir(current) as entries:
                if any(True for _ in entries):
                    return
            os.rmdir(current)
        except OSError as exc:
            log.warning("Could not clean up %s: %s", current, exc)
            return
        current = current.parent()


def hardlink_or_copy_file(source_path: str, destination_path: str, allow_overwrite: bool) -> None:
    """Hard-link source to destination, copying if linking is not possible."""
    try:
        os.link(source_path, destination_path)
        return
    except OSError as exc:
        log.info("Could not hardlink %s to %s: %s. Falling back to copy.", source_path, destination_path, exc)
    copy_file(source_path, destination_path, allow_overwrite)


def move_or_copy_file(source_path: str, destination_path: str, allow_overwrite: bool) -> None:
    """Move source to destination, copying and deleting if renaming is not possible."""
    try:
        os.rename(source_path, destination_path)
        return
    except OSError as exc:
        log.info("Could not move %s to %s: %s. Falling back to copy + delete.", source_path, destination_path, exc)
    copy_file(source_path, destination_path, allow_overwrite)
    try:
        os.remove(source_path)
    except OSError as exc:
        raise OSError(f"failed to remove {source_path!r}: {exc}") from exc


def copy_file(source_path: str, destination_path: str, allow_overwrite: bool) -> None:
    """Copy a regular file or a symbolic link, creating parent directories."""
    info = os.lstat(source_path)
    _check_overwrite(destination_path, allow_overwrite)
    try:
        os.makedirs(os.path.dirname(destination_path), mode=0o755, exist_ok=True)
    except OSError as exc:
        raise OSError(f"failed to create parent directory for {destination_path!r}: {exc}") from exc

    if is_symlink(info):
        _copy_symlink(source_path, destination_path)
    elif stat.S_ISREG(info.st_mode):
        _copy_regular_file(source_path, destination_path, info.st_mode)
    else:
        raise OSError(f"unsupported file type for {source_path!r}")


def _check_overwrite(destination_path: str, allow_overwrite: bool) -> None:
    if allow_overwrite:
        return
    try:
        os.lstat(destination_path)
    except FileNotFoundError:
        return
    except OSError as exc:
        raise OSError(f"failed to stat {destination_path!r}: {exc}") from exc
    raise FileExistsError(f"file already exists: {destination_path!r}")


def _copy_symlink(source_path: str, destination_path: str) -> None:
    try:
        target = os.readlink(source_path)
    except OSError as exc:
        raise OSError(f"failed to read symlink {source_path!r}: {exc}") from exc
    try:
        _remove(destination_path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        raise OSError(f"failed to remove {destination_path!r}: {exc}") from exc
    os.symlink(target, destination_path)


def _copy_regular_file(source_path: str, destination_path: str, mode: int) -> None:
    try:
        source = open(source_path, "rb")
    except OSError as exc:
        raise OSError(f"failed to open source file {source_path!r}: {exc}") from exc
    with source:
        # A symlink at the destination would otherwise have its target overwritten.
        try:
            if os.path.islink(destination_path):
                os.remove(destination_path)
        except OSError as exc:
            raise OSError(f"failed to remove existing symlink {destination_path!r}: {exc}") from exc

        try:
            descriptor = os.open(destination_path, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, 0o600)
        except OSError as exc:
            raise OSError(f"failed to open or create destination file {destination_path!r}: {exc}") from exc
        with os.fdopen(descriptor, "wb") as destination:
            try:
                shutil.copyfileobj(source, destination)
            except OSError as exc:
                raise OSError(
                    f"failed to copy file contents from {source_path!r} to {destination_path!r}: {exc}"
                ) from exc
            try:
                destination.flush()
                os.fsync(destination.fileno())
            except OSError as exc:
                raise OSError(f"failed to flush file {destination_path!r}: {exc}") from exc

    try:
        os.chmod(destination_path, mode & 0o777)
    except OSError as exc:
        raise OSError(f"failed to change file mode for {destination_path!r}: {exc}") from exc


def ensure_parent_dir(target: AbsolutePath) -> bool:
    """Create the parent directory of target; report failure as False."""
    parent = os.path.dirname(str(target))
    try:
        os.makedirs(parent, mode=0o755, exist_ok=True)
    except OSError as exc:
        log.error("Failed to create directory %s: %s", parent, exc)
        return False
    return True