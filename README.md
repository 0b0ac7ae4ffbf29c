# doot

The building blocks of a dotfiles manager. The package provides the pieces
that install the files of a dotfiles directory into a target directory as
links. It has no command-line entry point.

## Modules

- `doot.dotfiles_dir.find_dotfiles_dir()` finds the dotfiles directory. It
  tries `$DOOT_DIR` first, then `$XDG_DATA_HOME/dotfiles` (or
  `~/.local/share/dotfiles`), then `~/.dotfiles`. If none exists it raises
  `doot.log.FatalError`.
- `doot.config` holds the `Config` dataclass. `default_config()` returns the
  defaults. `from_file(path)` and `from_dotfiles_dir(dotfiles_dir)` read a
  TOML file on top of those defaults; `from_dotfiles_dir` reads
  `doot/config.toml`. Keys left out of the file keep their default values.
  `target_dir` and `diff_command` go through `expand_env`, which replaces
  `$NAME` and `${NAME}` with environment values.
- `doot.glob_collection.GlobCollection` holds include and exclude patterns
  and answers `matches(path)`. In these patterns `*` and `?` stop at the path
  separator, `**` does not, and `**/` also matches zero directories. Invalid
  patterns are dropped with a warning. `compile_glob(pattern, separator)`
  compiles a single pattern and raises `GlobSyntaxError` on bad syntax.
- `doot.linkmode` installs files as symlinks (`SymlinkLinkMode`) or as hard
  links (`HardlinkLinkMode`). `get_link_mode(config)` picks one from
  `config.use_hardlinks`. Each mode can create a link, recognise an installed
  link, decide whether a link can be removed safely, and rebuild the list of
  installed links by scanning a directory (`recalculate_cache`).
- `doot.files` replaces a file atomically with a link (`replace_with_link`)
  and adopts a changed target file into the dotfiles directory
  (`adopt_changes`). It copies, moves or hard-links files (`copy_file`,
  `move_or_copy_file`, `hardlink_or_copy_file`). It also removes links and the
  directories they leave empty (`remove_and_cleanup`, `cleanup_empty_dir`) and
  creates parent directories (`ensure_parent_dir`).
- `doot.colfer` encodes and decodes the cache records (`DootCache`,
  `CacheEntry`, `InstalledFilesCache`, `InstalledFile`) in a compact binary
  format.
- `doot.cache` loads and saves the cache file `doot-cache.bin`. The file lives
  in `$DOOT_CACHE_DIR` or `~/.cache/doot`. If the file is missing, unreadable
  or of another version, `load()` returns an empty cache.
  `compute_cache_key(dotfiles_dir, target_dir)` builds the key of one entry.
- `doot.paths` (`RelativePath`, `AbsolutePath`),
  `doot.symlink_collection.SymlinkCollection`, `doot.symlinks`,
  `doot.user_input.request_input` and `doot.log` are supporting helpers.
  `log.fatal` raises `FatalError` and does not exit.

## Example

```python
from doot import cache, config, linkmode
from doot.dotfiles_dir import find_dotfiles_dir

dotfiles = find_dotfiles_dir()
cfg = config.from_dotfiles_dir(dotfiles)
mode = linkmode.get_link_mode(cfg)

state = cache.load()
installed = state.get_entry(cache.compute_cache_key(dotfiles, cfg.target_dir))
print(installed.get_links().print_list())
```

## What it does not do

The package does not put these pieces together into a complete install or
clean run. It does not scan the dotfiles directory with the include and
exclude filters, and it does not install or remove every dotfile in one call.
There is no command to run. It does not run hook scripts or custom commands
from the dotfiles directory. It does not handle encrypted (`.doot-crypt`)
files or host-specific directories beyond the settings that `Config` holds.

## Installation

```
pip install .
```

## Tests

```
pip install .[test]
pytest
```