"""Building blocks for installing a dotfiles directory as links: configuration, glob filters, link modes, file operations and the installed-files cache."""

__version__ = "0.1.0"