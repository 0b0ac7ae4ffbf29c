"""Binary cache records in the Colfer wire format."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeVar

from doot.paths import AbsolutePath
from doot.symlink_collection import SymlinkCollection

COLFER_SIZE_MAX = 16 * 1024 * 1024
COLFER_LIST_MAX = 64 * 1024

_END = 0x7F
_FIXED_VERSION_HEADER = 0x80
_UINT32_LIMIT = 1 << 32
_VARINT_VERSION_LIMIT = 1 << 21

_T = TypeVar("_T")


class ColferMaxError(ValueError):
    """A size or element count exceeds the configured limits."""


class ColferHeaderError(ValueError):
    """An unknown field header was found in the data."""

    def __init__(self, index: int) -> None:
        super().__init__(f"colfer: unknown header at byte {index}")
        self.index = index


class ColferTailError(ValueError):
    """The data continues after a complete record."""

    def __init__(self, index: int) -> None:
        super().__init__(f"colfer: data continuation at byte {index}")
        self.index = index


def _to_bytes(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


def _varint_size(value: int) -> int:
    size = 1
    while value >= 0x80:
        value >>= 7
        size += 1
    return size


def _put_varint(out: bytearray, value: int) -> None:
    while value >= 0x80:
        out.append((value | 0x80) & 0xFF)
        value >>= 7
    out.append(value)


def _put_text(out: bytearray, header: int, raw: bytes) -> None:
    if raw:
        out.append(header)
        _put_varint(out, len(raw))
        out += raw


def _text_len(raw: bytes, name: str) -> int:
    if not raw:
        return 0
    if len(raw) > COLFER_SIZE_MAX:
        raise ColferMaxError(f"colfer: field {name} exceeds {COLFER_SIZE_MAX} bytes")
    return 1 + _varint_size(len(raw)) + len(raw)


def _check_struct_len(size: int, name: str) -> int:
    if size > COLFER_SIZE_MAX:
        raise ColferMaxError(f"colfer: struct {name} exceeds {COLFER_SIZE_MAX} bytes")
    return size


class _Reader:
    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)
        self.pos = 0

    def byte(self) -> int:
        if self.pos >= len(self.data):
            raise EOFError("colfer: unexpected end of data")
        value = self.data[self.pos]
        self.pos += 1
        return value

    def varint(self) -> int:
        value = self.byte()
        if value >= 0x80:
            value &= 0x7F
            shift = 7
            while True:
                part = self.byte()
                if part < 0x80:
                    value |= part << shift
                    break
                value |= (part & 0x7F) << shift
                shift += 7
        return value

    def take(self, size: int) -> bytes:
        end = self.pos + size
        if end > len(self.data):
            raise EOFError("colfer: unexpected end of data")
        chunk = self.data[self.pos:end]
        self.pos = end
        return chunk

    def text(self, name: str) -> str:
        size = self.varint()
        if size > COLFER_SIZE_MAX:
            raise ColferMaxError(f"colfer: {name} size {size} exceeds {COLFER_SIZE_MAX} bytes")
        return self.take(size).decode("utf-8", "surrogateescape")

    def list_length(self, name: str) -> int:
        count = self.varint()
        if count > COLFER_LIST_MAX:
            raise ColferMaxError(f"colfer: {name} length {count} exceeds {COLFER_LIST_MAX} elements")
        return count

    def finish(self, header: int) -> None:
        if header != _END:
            raise ColferHeaderError(self.pos - 1)


def _decode(cls: type[_T], data: bytes, name: str) -> tuple[_T, int]:
    reader = _Reader(data)
    if not reader.data:
        raise EOFError("colfer: no data")
    try:
        record = cls._read(reader)  # type: ignore[attr-defined]
    except EOFError:
        if reader.pos >= COLFER_SIZE_MAX or len(reader.data) >= COLFER_SIZE_MAX:
            raise ColferMaxError(f"colfer: struct {name} size exceeds {COLFER_SIZE_MAX} bytes") from None
        raise
    if reader.pos >= COLFER_SIZE_MAX:
        raise ColferMaxError(f"colfer: struct {name} size exceeds {COLFER_SIZE_MAX} bytes")
    return record, reader.pos


def _from_bytes(cls: type[_T], data: bytes, name: str) -> _T:
    record, consumed = _decode(cls, data, name)
    if consumed < len(data):
        raise ColferTailError(consumed)
    return record


@dataclass
class InstalledFile:
    """One installed link: where it lives and what it points to."""

    path: str = ""
    content: str = ""

    def encoded_len(self) -> int:
        size = 1
        size += _text_len(_to_bytes(self.path), "cache.InstalledFile.path")
        size += _text_len(_to_bytes(self.content), "cache.InstalledFile.content")
        return _check_struct_len(size, "cache.InstalledFile")

    def _write(self, out: bytearray) -> None:
        _put_text(out, 0, _to_bytes(self.path))
        _put_text(out, 1, _to_bytes(self.content))
        out.append(_END)

    def encode(self) -> bytes:
        self.encoded_len()
        out = bytearray()
        self._write(out)
        return bytes(out)

    @classmethod
    def _read(cls, reader: _Reader) -> InstalledFile:
        record = cls()
        header = reader.byte()
        if header == 0:
            record.path = reader.text("cache.InstalledFile.path")
            header = reader.byte()
        if header == 1:
            record.content = reader.text("cache.InstalledFile.content")
            header = reader.byte()
        reader.finish(header)
        return record

    @classmethod
    def decode(cls, data: bytes) -> tuple[InstalledFile, int]:
        """Decode one record from the start of data; return it and the bytes read."""
        return _decode(cls, data, "cache.InstalledFile")

    @classmethod
    def from_bytes(cls, data: bytes) -> InstalledFile:
        """Decode data that must hold exactly one record."""
        return _from_bytes(cls, data, "cache.InstalledFile")


@dataclass
class InstalledFilesCache:
    """The links installed for one dotfiles/target pair."""

    links: list[InstalledFile] = field(default_factory=list)

    def encoded_len(self) -> int:
        size = 1
        if self.links:
            count = len(self.links)
            if count > COLFER_LIST_MAX:
                raise ColferMaxError(
                    f"colfer: field cache.InstalledFilesCache.links exceeds {COLFER_LIST_MAX} elements"
                )
            size += 1 + _varint_size(count)
            size += sum(link.encoded_len() for link in self.links)
        return _check_struct_len(size, "cache.InstalledFilesCache")

    def _write(self, out: bytearray) -> None:
        if self.links:
            out.append(0)
            _put_varint(out, len(self.links))
            for link in self.links:
                link._write(out)
        out.append(_END)

    def encode(self) -> bytes:
        self.encoded_len()
        out = bytearray()
        self._write(out)
        return bytes(out)

    @classmethod
    def _read(cls, reader: _Reader) -> InstalledFilesCache:
        record = cls()
        header = reader.byte()
        if header == 0:
            count = reader.list_length("cache.InstalledFilesCache.links")
            record.links = [InstalledFile._read(reader) for _ in range(count)]
            header = reader.byte()
        reader.finish(header)
        return record

    @classmethod
    def decode(cls, data: bytes) -> tuple[InstalledFilesCache, int]:
        """Decode one record from the start of data; return it and the bytes read."""
        return _decode(cls, data, "cache.InstalledFilesCache")

    @classmethod
    def from_bytes(cls, data: bytes) -> InstalledFilesCache:
        """Decode data that must hold exactly one record."""
        return _from_bytes(cls, data, "cache.InstalledFilesCache")

    def get_links(self) -> SymlinkCollection:
        """The stored links as a collection of absolute paths."""
        links = SymlinkCollection()
        for link in self.links:
            links.add(AbsolutePath(link.path), AbsolutePath(link.content))
        return links

    def set_links(self, links: SymlinkCollection) -> None:
        """Replace the stored links with the contents of a collection."""
        self.links = [InstalledFile(str(path), str(content)) for path, content in links.items()]


@dataclass
class CacheEntry:
    """Installed files, keyed by dotfiles directory and target directory."""

    cache_key: str = ""
    installed_files: InstalledFilesCache | None = field(default_factory=InstalledFilesCache)

    def encoded_len(self) -> int:
        size = 1
        size += _text_len(_to_bytes(self.cache_key), "cache.CacheEntry.cacheKey")
        if self.installed_files is not None:
            size += 1 + self.installed_files.encoded_len()
        return _check_struct_len(size, "cache.CacheEntry")

    def _write(self, out: bytearray) -> None:
        _put_text(out, 0, _to_bytes(self.cache_key))
        if self.installed_files is not None:
            out.append(1)
            self.installed_files._write(out)
        out.append(_END)

    def encode(self) -> bytes:
        self.encoded_len()
        out = bytearray()
        self._write(out)
        return bytes(out)

    @classmethod
    def _read(cls, reader: _Reader) -> CacheEntry:
        record = cls(installed_files=None)
        header = reader.byte()
        if header == 0:
            record.cache_key = reader.text("cache.CacheEntry.cacheKey")
            header = reader.byte()
        if header == 1:
            record.installed_files = InstalledFilesCache._read(reader)
            header = reader.byte()
        reader.finish(header)
        return record

    @classmethod
    def decode(cls, data: bytes) -> tuple[CacheEntry, int]:
        """Decode one record from the start of data; return it and the bytes read."""
        return _decode(cls, data, "cache.CacheEntry")

    @classmethod
    def from_bytes(cls, data: bytes) -> CacheEntry:
        """Decode data that must hold exactly one record."""
        return _from_bytes(cls, data, "cache.CacheEntry")


@dataclass
class DootCache:
    """The whole cache file: a format version and its entries."""

    version: int = 0
    entries: list[CacheEntry] = field(default_factory=list)

    def encoded_len(self) -> int:
        if not 0 <= self.version < _UINT32_LIMIT:
            raise ValueError(f"cache version {self.version} does not fit in 32 bits")
        size = 1
        if self.version >= _VARINT_VERSION_LIMIT:
            size += 5
        elif self.version:
            size += 1 + _varint_size(self.version)
        if self.entries:
            count = len(self.entries)
            if count > COLFER_LIST_MAX:
                raise ColferMaxError(
                    f"colfer: field cache.DootCache.entries exceeds {COLFER_LIST_MAX} elements"
                )
            size += 1 + _varint_size(count)
            size += sum(entry.encoded_len() for entry in self.entries)
        return _check_struct_len(size, "cache.DootCache")

    def _write(self, out: bytearray) -> None:
        if self.version >= _VARINT_VERSION_LIMIT:
            out.append(_FIXED_VERSION_HEADER)
            out += self.version.to_bytes(4, "big")
        elif self.version:
            out.append(0)
            _put_varint(out, self.version)
        if self.entries:
            out.append(1)
            _put_varint(out, len(self.entries))
            for entry in self.entries:
                entry._write(out)
        out.append(_END)

    def encode(self) -> bytes:
        self.encoded_len()
        out = bytearray()
        self._write(out)
        return bytes(out)

    @classmethod
    def _read(cls, reader: _Reader) -> DootCache:
        record = cls()
        header = reader.byte()
        if header == 0:
            record.version = reader.varint() & (_UINT32_LIMIT - 1)
            header = reader.byte()
        elif header == _FIXED_VERSION_HEADER:
            record.version = int.from_bytes(reader.take(4), "big")
            header = reader.byte()
        if header == 1:
            count = reader.list_length("cache.DootCache.entries")
            record.entries = [CacheEntry._read(reader) for _ in range(count)]
            header = reader.byte()
        reader.finish(header)
        return record

    @classmethod
    def decode(cls, data: bytes) -> tuple[DootCache, int]:
        """Decode one record from the start of data; return it and the bytes read."""
        return _decode(cls, data, "cache.DootCache")

    @classmethod
    def from_bytes(cls, data: bytes) -> DootCache:
        """Decode data that must hold exactly one record."""
        return _from_bytes(cls, data, "cache.DootCache")

    def get_entry(self, cache_key: str) -> InstalledFilesCache:
        """Return the installed files for a key, adding an empty entry if missing."""
        for entry in self.entries:
            if entry.cache_key == cache_key:
                if entry.installed_files is None:
                    entry.installed_files = InstalledFilesCache()
                return entry.installed_files
        new_entry = CacheEntry(cache_key, InstalledFilesCache())
        self.entries.append(new_entry)
        return new_entry.installed_files