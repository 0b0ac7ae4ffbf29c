"""A mapping from installed link paths to their dotfile targets."""

from __future__ import annotations

import json
from collections.abc import ItemsView, Iterator, Mapping

from doot.paths import AbsolutePath

_JSON_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


class SymlinkCollection:
    """Link path -> link content (target)."""

    def __init__(self, links: Mapping[AbsolutePath, AbsolutePath] | None = None) -> None:
        self._links: dict[AbsolutePath, AbsolutePath] = dict(links or {})

    def add(self, link_path: AbsolutePath, link_content: AbsolutePath) -> None:
        self._links[link_path] = link_content

    def get(self, link_path: AbsolutePath) -> AbsolutePath | None:
        return self._links.get(link_path)

    def remove(self, link_path: AbsolutePath) -> None:
        self._links.pop(link_path, None)

    def items(self) -> ItemsView[AbsolutePath, AbsolutePath]:
        return self._links.items()

    def __len__(self) -> int:
        return len(self._links)

    def __contains__(self, link_path: object) -> bool:
        return link_path in self._links

    def __iter__(self) -> Iterator[AbsolutePath]:
        return iter(self._links)

    def print_list(self) -> str:
        """One 'path -> target' line per link, sorted by path."""
        return "".join(f"{path} -> {self._links[path]}\n" for path in sorted(self._links))

    def to_json(self) -> str:
        """Compact JSON object with sorted keys and HTML-safe escaping."""
        encoded = json.dumps(
            {str(path): str(content) for path, content in self._links.items()},
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        )
        for char, escape in _JSON_HTML_ESCAPES.items():
            encoded = encoded.replace(char, escape)
        return encoded