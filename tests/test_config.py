import os

import pytest

from doot import config as cfg
from doot.log import FatalError
from doot.paths import AbsolutePath


@pytest.fixture
def home(tmp_path, monkeypatch):
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return str(home_dir)


def write_config(directory, text):
    doot_dir = directory / "doot"
    doot_dir.mkdir(parents=True, exist_ok=True)
    path = doot_dir / "config.toml"
    path.write_text(text)
    return path


def test_default_config_values(home):
    config = cfg.default_config()
    assert config.target_dir == home
    assert config.exclude_files == ["**/.*", "LICENSE", "README.md"]
    assert config.implicit_dot is True
    assert config.use_hardlinks is False
    assert config.diff_command == "diff --unified --color=always"
    assert config.hosts == {}


def test_missing_file_gives_defaults(home, tmp_path):
    config = cfg.from_file(str(tmp_path / "nope.toml"))
    assert config == cfg.default_config()


def test_values_are_read_from_file(home, tmp_path):
    target = tmp_path / "target"
    path = write_config(
        tmp_path,
        f'target_dir = "{target}"\n'
        'exclude_files = ["a", "b"]\n'
        "use_hardlinks = true\n"
        "implicit_dot = false\n"
        '[hosts]\nmachine = "hosts/M"\n',
    )
    config = cfg.from_file(str(path))
    assert config.target_dir == str(target)
    assert config.exclude_files == ["a", "b"]
    assert config.use_hardlinks is True
    assert config.implicit_dot is False
    assert config.hosts == {"machine": "hosts/M"}
    assert config.include_files == []


def test_from_dotfiles_dir_reads_doot_config(home, tmp_path):
    write_config(tmp_path, "explore_excluded_dirs = true\n")
    config = cfg.from_dotfiles_dir(AbsolutePath(str(tmp_path)))
    assert config.explore_excluded_dirs is True


def test_target_dir_is_expanded_and_cleaned(home, tmp_path, monkeypatch):
    monkeypatch.setenv("DOOT_TEST_BASE", str(tmp_path))
    path = write_config(tmp_path, 'target_dir = "${DOOT_TEST_BASE}/dots/../x"\n')
    config = cfg.from_file(str(path))
    assert config.target_dir == os.path.join(str(tmp_path), "x")


def test_relative_target_dir_is_fatal(home, tmp_path):
    path = write_config(tmp_path, 'target_dir = "relative/dir"\n')
    with pytest.raises(FatalError):
        cfg.from_file(str(path))


def test_nested_implicit_dot_ignore_is_fatal(home, tmp_path):
    path = write_config(tmp_path, 'implicit_dot_ignore = ["config/nested"]\n')
    with pytest.raises(FatalError, match="Consider adding 'config' instead"):
        cfg.from_file(str(path))


def test_invalid_toml_keeps_defaults(home, tmp_path):
    path = write_config(tmp_path, "this is = = not toml\n")
    assert cfg.from_file(str(path)) == cfg.default_config()


def test_wrong_type_keeps_defaults(home, tmp_path):
    path = write_config(tmp_path, 'use_hardlinks = "yes"\n')
    assert cfg.from_file(str(path)).use_hardlinks is False


def test_diff_command_is_expanded_and_trimmed(home, tmp_path, monkeypatch):
    monkeypatch.setenv("DOOT_TEST_TOOL", "difftool")
    path = write_config(tmp_path, 'diff_command = "  $DOOT_TEST_TOOL --flag  "\n')
    assert cfg.from_file(str(path)).diff_command == "difftool --flag"


def test_expand_env_forms(monkeypatch):
    monkeypatch.setenv("DOOT_VAR", "value")
    monkeypatch.delenv("DOOT_UNSET_VAR", raising=False)
    assert cfg.expand_env("$DOOT_VAR/x") == "value/x"
    assert cfg.expand_env("${DOOT_VAR}x") == "valuex"
    assert cfg.expand_env("a$DOOT_UNSET_VAR.b") == "a.b"
    assert cfg.expand_env("cost $") == "cost $"
    assert cfg.expand_env("a${}b") == "ab"