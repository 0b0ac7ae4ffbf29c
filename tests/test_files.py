import os
import stat

import pytest

from doot import files
from doot.linkmode import HardlinkLinkMode, SymlinkLinkMode, hardlink_id
from doot.paths import AbsolutePath


def test_copy_regular_file_keeps_content_and_mode(tmp_path):
    source = tmp_path / "src"
    source.write_text("hello content")
    os.chmod(source, 0o640)
    destination = tmp_path / "a" / "b" / "dst"
    files.copy_file(str(source), str(destination), False)
    assert destination.read_text() == "hello content"
    assert stat.S_IMODE(os.stat(destination).st_mode) == 0o640


def test_copy_refuses_to_overwrite(tmp_path):
    source = tmp_path / "src"
    source.write_text("new")
    destination = tmp_path / "dst"
    destination.write_text("old")
    with pytest.raises(FileExistsError):
        files.copy_file(str(source), str(destination), False)
    assert destination.read_text() == "old"
    files.copy_file(str(source), str(destination), True)
    assert destination.read_text() == "new"


def test_copy_symlink_copies_link_itself(tmp_path):
    source = tmp_path / "link"
    os.symlink("/some-file", source)
    destination = tmp_path / "copy"
    destination.write_text("existing")
    files.copy_file(str(source), str(destination), True)
    assert os.readlink(destination) == "/some-file"


def test_copy_over_symlink_replaces_link_not_target(tmp_path):
    victim = tmp_path / "victim"
    victim.write_text("untouched")
    destination = tmp_path / "dst"
    os.symlink(str(victim), destination)
    source = tmp_path / "src"
    source.write_text("fresh")
    files.copy_file(str(source), str(destination), True)
    assert not os.path.islink(destination)
    assert destination.read_text() == "fresh"
    assert victim.read_text() == "untouched"


def test_copy_directory_is_unsupported(tmp_path):
    source = tmp_path / "dir"
    source.mkdir()
    with pytest.raises(OSError, match="unsupported file type"):
        files.copy_file(str(source), str(tmp_path / "dst"), False)


def test_copy_missing_source_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        files.copy_file(str(tmp_path / "missing"), str(tmp_path / "dst"), False)


def test_move_or_copy_file(tmp_path):
    source = tmp_path / "src"
    source.write_text("moving")
    destination = tmp_path / "dst"
    files.move_or_copy_file(str(source), str(destination), False)
    assert not source.exists()
    assert destination.read_text() == "moving"


def test_hardlink_or_copy_file(tmp_path):
    source = tmp_path / "src"
    source.write_text("shared")
    destination = tmp_path / "dst"
    files.hardlink_or_copy_file(str(source), str(destination), False)
    assert destination.read_text() == "shared"
    source_id = hardlink_id(str(source))
    assert source_id is not None
    assert source_id == hardlink_id(str(destination))


def test_replace_with_symlink(tmp_path):
    source = tmp_path / "dotfiles" / "file1"
    source.parent.mkdir()
    source.write_text("dot")
    target = tmp_path / "home" / "file1"
    target.parent.mkdir()
    target.write_text("old")
    files.replace_with_link(AbsolutePath(str(target)), AbsolutePath(str(source)), SymlinkLinkMode())
    assert os.readlink(target) == str(source)
    assert sorted(os.listdir(target.parent)) == ["file1"]


def test_replace_with_link_failure_keeps_target(tmp_path):
    target = tmp_path / "file1"
    target.write_text("old")
    with pytest.raises(FileNotFoundError):
        files.replace_with_link(
            AbsolutePath(str(target)), AbsolutePath(str(tmp_path / "missing")), HardlinkLinkMode()
        )
    assert target.read_text() == "old"
    assert os.listdir(tmp_path) == ["file1"]


def test_adopt_changes(tmp_path):
    source = tmp_path / "dotfiles" / "file1"
    source.parent.mkdir()
    source.write_text("original")
    target = tmp_path / "home" / "file1"
    target.parent.mkdir()
    target.write_text("Some external program has replaced this")
    files.adopt_changes(AbsolutePath(str(target)), AbsolutePath(str(source)), SymlinkLinkMode())
    assert source.read_text() == "Some external program has replaced this"
    assert os.readlink(target) == str(source)


def test_adopt_changes_with_hardlinks(tmp_path):
    source = tmp_path / "dotfiles" / "file1"
    source.parent.mkdir()
    os.symlink("/some-file", source)
    target = tmp_path / "home" / "file1"
    target.parent.mkdir()
    target.write_text("adopted")
    files.adopt_changes(AbsolutePath(str(target)), AbsolutePath(str(source)), HardlinkLinkMode())
    assert not os.path.islink(source)
    assert os.path.samefile(source, target)
    assert source.read_text() == "adopted"


def test_remove_and_cleanup_removes_empty_parents(tmp_path):
    home = tmp_path / "home"
    nested = home / "a" / "b"
    nested.mkdir(parents=True)
    (home / "keep").write_text("k")
    link = nested / "link"
    os.symlink("/nowhere", link)
    removed = files.remove_and_cleanup(AbsolutePath(str(link)), AbsolutePath(str(home)))
    assert removed is True
    assert sorted(os.listdir(home)) == ["keep"]


def test_remove_and_cleanup_keeps_non_empty_dirs(tmp_path):
    home = tmp_path / "home"
    nested = home / "a"
    nested.mkdir(parents=True)
    (nested / "other").write_text("o")
    (nested / "link").write_text("l")
    assert files.remove_and_cleanup(AbsolutePath(str(nested / "link")), AbsolutePath(str(home)))
    assert os.listdir(nested) == ["other"]


def test_remove_and_cleanup_missing_file(tmp_path):
    missing = AbsolutePath(str(tmp_path / "missing"))
    assert files.remove_and_cleanup(missing, AbsolutePath(str(tmp_path))) is False


def test_cleanup_empty_dir_stops_at_stop_dir(tmp_path):
    stop = tmp_path / "stop"
    deep = stop / "x" / "y"
    deep.mkdir(parents=True)
    files.cleanup_empty_dir(AbsolutePath(str(deep)), AbsolutePath(str(stop)))
    assert stop.is_dir()
    assert os.listdir(stop) == []


def test_ensure_parent_dir(tmp_path):
    target = tmp_path / "p" / "q" / "file"
    assert files.ensure_parent_dir(AbsolutePath(str(target))) is True
    assert target.parent.is_dir()
    blocker = tmp_path / "blocker"
    blocker.write_text("b")
    assert files.ensure_parent_dir(AbsolutePath(str(blocker / "sub" / "file"))) is False