"""Storage of document blobs in preallocated, memory-mapped data files.

Each blob is written as a small header followed by its bytes, optionally
LZ4-compressed. The header is one byte holding the version in its high
nibble and the compression flag in its lowest bit, then the blob size as a
varint and, for compressed blobs only, the compressed size as a varint.
"""

from __future__ import annotations

import mmap
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Union

import lz4.block

from .errors import FileIOError, InvalidArgumentError, JonoonDBError
from .filename_manager import FileInfo, FileNameManager
from .files import fast_allocate

LZ4_MAX_INPUT_SIZE = 0x7E000000
MAX_VARINT_BYTES = 10
BLOB_HEADER_VERSION = 1
DEFAULT_MEM_MAP_LRU_CACHE_SIZE = 3

_UINT64_LIMIT = 1 << 64
_VARINT_LIMITS = (
    128,
    16384,
    2097152,
    268435456,
    34359738368,
    4398046511104,
    562949953421312,
    72057594037927936,
    9223372036854775808,
)

BlobLike = Union[bytes, bytearray, memoryview, object]


def encode_varint(value: int) -> bytes:
    """Encode an unsigned 64-bit integer as a little-endian base-128 varint."""
    if not 0 <= value < _UINT64_LIMIT:
        raise InvalidArgumentError(
            f"Argument value {value} is not an unsigned 64 bit integer."
        )
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def decode_varint(data, offset: int = 0) -> tuple[int, int]:
    """Decode a varint at ``offset``; return the value and the offset after it."""
    value = 0
    for i in range(MAX_VARINT_BYTES):
        try:
            byte = data[offset + i]
        except IndexError:
            raise JonoonDBError(
                f"Varint at offset {offset} is truncated."
            ) from None
        value |= (byte & 0x7F) << (7 * i)
        if not byte & 0x80:
            return value & (_UINT64_LIMIT - 1), offset + i + 1
    raise JonoonDBError("Varint is greater than 10 bytes.")


def varint_size(value: int) -> int:
    """Number of bytes the varint encoding of ``value`` takes."""
    for size, limit in enumerate(_VARINT_LIMITS, start=1):
        if value < limit:
            return size
    return MAX_VARINT_BYTES


def header_size(blob_size: int, comp_size: Optional[int] = None) -> int:
    """Size of a blob header; ``comp_size`` of None or below 0 means uncompressed."""
    size = 1 + varint_size(blob_size)
    if comp_size is not None and comp_size > -1:
        size += varint_size(comp_size)
    return size


def max_compressed_size(size: int) -> int:
    """Worst-case size of ``size`` bytes after LZ4 compression."""
    if size > LZ4_MAX_INPUT_SIZE:
        raise JonoonDBError(
            f"Unable to compress data of size {size}. Its greater than "
            f"LZ4_MAX_INPUT_SIZE i.e. {LZ4_MAX_INPUT_SIZE}."
        )
    return size + size // 255 + 16


@dataclass(frozen=True)
class BlobMetadata:
    """Where a blob lives: the data file key and the offset within that file."""

    file_key: int = 0
    offset: int = 0


@dataclass
class BlobHeader:
    """The header written in front of every blob."""

    version: int = BLOB_HEADER_VERSION
    compressed: bool = False
    blob_size: int = 0
    comp_size: int = 0

    def encode(self) -> bytes:
        """The header's bytes as written to a data file."""
        flags = ((self.version & 0x0F) << 4) | (1 if self.compressed else 0)
        out = bytes([flags]) + encode_varint(self.blob_size)
        if self.compressed:
            out += encode_varint(self.comp_size)
        return out


def decode_blob_header(data, offset: int = 0) -> tuple[BlobHeader, int]:
    """Read a header at ``offset``; return it and the offset of the blob bytes."""
    try:
        flags = data[offset]
    except IndexError:
        raise JonoonDBError(
            f"Failed to read the blob header. Offset {offset} is outside the data."
        ) from None
    header = BlobHeader(version=(flags & 0xF0) >> 4, compressed=(flags & 1) == 1)
    try:
        header.blob_size, offset = decode_varint(data, offset + 1)
    except JonoonDBError as exc:
        raise JonoonDBError(
            "Failed to read the blob header. Varint blobSize is greater than 10 "
            "bytes."
        ) from exc
    if header.compressed:
        try:
            header.comp_size, offset = decode_varint(data, offset)
        except JonoonDBError as exc:
            raise JonoonDBError(
                "Failed to read the blob header. Varint compBlobSize is greater "
                "than 10 bytes."
            ) from exc
    return header, offset


def _decompress(raw: bytes, size: int, path: str, position: int) -> bytes:
    if size == 0:
        return b""
    try:
        return lz4.block.decompress(raw, uncompressed_size=size)
    except (lz4.block.LZ4BlockError, ValueError) as exc:
        raise JonoonDBError(
            f"Decompression failed while reading blob from file {path} at offset "
            f"{position}. Error returned by compression lib: {exc}."
        ) from exc


def _read_blob_at(view, position: int, path: str) -> tuple[bytes, int]:
    header, cursor = decode_blob_header(view, position)
    stored = header.comp_size if header.compressed else header.blob_size
    end = cursor + stored
    if end > len(view):
        raise JonoonDBError(
            f"Blob at offset {position} in file {path} extends past the end of "
            "the file."
        )
    raw = bytes(view[cursor:end])
    if header.compressed:
        return _decompress(raw, header.blob_size, path, position), end
    return raw, end


def _as_bytes(blob) -> bytes:
    if isinstance(blob, (bytes, bytearray, memoryview)):
        return bytes(blob)
    return bytes(blob)


class _DataFile:
    """A memory-mapped data file with a write cursor."""

    def __init__(self, path: str, writable: bool) -> None:
        self.path = path
        self.write_offset = 0
        try:
            self._file = open(path, "r+b" if writable else "rb")
        except OSError as exc:
            raise FileIOError(
                f"Failed to open file at path {path}. Reason: {exc.strerror or exc}"
            ) from exc
        try:
            self.view = mmap.mmap(
                self._file.fileno(),
                0,
                access=mmap.ACCESS_WRITE if writable else mmap.ACCESS_READ,
            )
        except (OSError, ValueError) as exc:
            self._file.close()
            raise FileIOError(
                f"Failed to memory map file {path}. Reason: {exc}"
            ) from exc

    @property
    def size(self) -> int:
        return len(self.view)

    def write(self, data: bytes) -> None:
        end = self.write_offset + len(data)
        if end > len(self.view):
            raise JonoonDBError(
                f"Cannot write {len(data)} bytes at offset {self.write_offset} in "
                f"file {self.path} of size {len(self.view)}."
            )
        self.view[self.write_offset:end] = data
        self.write_offset = end

    def flush(self, offset: int, num_bytes: int) -> None:
        if num_bytes <= 0:
            return
        start = offset - offset % mmap.ALLOCATIONGRANULARITY
        try:
            self.view.flush(start, offset + num_bytes - start)
        except OSError as exc:
            raise FileIOError(
                f"Failed to flush file {self.path}. Reason: {exc.strerror or exc}"
            ) from exc

    def close(self) -> None:
        if not self.view.closed:
            self.view.close()
        self._file.close()


@dataclass
class _CacheEntry:
    file: _DataFile
    evictable: bool


class BlobManager:
    """Writes blobs to rolling data files and reads them back by metadata."""

    def __init__(
        self,
        file_name_manager: FileNameManager,
        max_data_file_size: int,
        synchronous: bool = True,
    ) -> None:
        if max_data_file_size <= 0:
            raise InvalidArgumentError(
                "Argument max_data_file_size must be greater than 0."
            )
        self._fnm = file_name_manager
        self._max_size = max_data_file_size
        self._synchronous = synchronous
        self._write_lock = threading.Lock()
        self._cache_lock = threading.Lock()
        self._cache_size = DEFAULT_MEM_MAP_LRU_CACHE_SIZE
        self._readers: OrderedDict[int, _CacheEntry] = OrderedDict()
        self._closed = False

        self._current_info = self._fnm.current_data_file_info(True)
        path = self._current_info.file_name_with_path
        try:
            self._current = _DataFile(path, writable=True)
        except FileIOError:
            fast_allocate(path, max_data_file_size)
            self._current = _DataFile(path, writable=True)

        if self._current_info.data_length != -1:
            self._current.write_offset = self._current_info.data_length
            self._fnm.update_data_file_length(
                self._current_info.file_key, self._current.write_offset
            )

        self._readers[self._current_info.file_key] = _CacheEntry(self._current, False)

    @property
    def open_file_keys(self) -> tuple[int, ...]:
        """Keys of the data files currently mapped, least recently used first."""
        with self._cache_lock:
            return tuple(self._readers)

    def _estimate(self, size: int, compress: bool) -> int:
        comp_size = max_compressed_size(size) if compress else None
        return header_size(size, comp_size) + (comp_size if compress else size)

    def _flush(self, offset: int, num_bytes: int) -> None:
        if self._synchronous:
            self._current.flush(offset, num_bytes)

    def _switch_to_new_data_file(self) -> None:
        info = self._fnm.next_data_file_info()
        fast_allocate(info.file_name_with_path, self._max_size)
        new_file = _DataFile(info.file_name_with_path, writable=True)
        self._fnm.update_data_file_length(
            self._current_info.file_key, self._current.write_offset
        )
        with self._cache_lock:
            entry = self._readers.get(self._current_info.file_key)
            if entry is not None:
                entry.evictable = True
            self._readers[info.file_key] = _CacheEntry(new_file, False)
        self._current_info = info
        self._current = new_file

    def _put_internal(self, data: bytes, compress: bool) -> tuple[BlobMetadata, int]:
        offset = self._current.write_offset
        if compress:
            payload = lz4.block.compress(data, store_size=False) if data else b"\x00"
            header = BlobHeader(
                compressed=True, blob_size=len(data), comp_size=len(payload)
            )
        else:
            payload = data
            header = BlobHeader(compressed=False, blob_size=len(data))
        encoded = header.encode()
        self._current.write(encoded)
        self._current.write(payload)
        metadata = BlobMetadata(self._current_info.file_key, offset)
        return metadata, len(encoded) + len(payload)

    def put(self, blob: BlobLike, compress: bool = False) -> BlobMetadata:
        """Store one blob and return where it was written."""
        data = _as_bytes(blob)
        with self._write_lock:
            offset = self._current.write_offset
            if self._estimate(len(data), compress) + offset > self._max_size:
                self._switch_to_new_data_file()
                offset = self._current.write_offset
            try:
                metadata, written = self._put_internal(data, compress)
                self._flush(offset, written)
            except BaseException:
                self._current.write_offset = offset
                raise
            self._fnm.update_data_file_length(
                self._current_info.file_key, self._current.write_offset
            )
            return metadata

    def multi_put(
        self, blobs: Iterable[BlobLike], compress: bool = False
    ) -> list[BlobMetadata]:
        """Store several blobs in order and return where each was written."""
        items = [_as_bytes(blob) for blob in blobs]
        result: list[BlobMetadata] = []
        with self._write_lock:
            base = self._current.write_offset
            total = 0
            for data in items:
                current = self._current.write_offset
                if self._estimate(len(data), compress) + current > self._max_size:
                    try:
                        self._flush(base, total)
                    except BaseException:
                        self._current.write_offset = base
                        raise
                    self._switch_to_new_data_file()
                    base = self._current.write_offset
                    total = 0
                try:
                    metadata, written = self._put_internal(data, compress)
                except BaseException:
                    self._current.write_offset = base
                    raise
                total += written
                result.append(metadata)
            try:
                self._flush(base, total)
            except BaseException:
                self._current.write_offset = base
                raise
            self._fnm.update_data_file_length(
                self._current_info.file_key, self._current.write_offset
            )
        return result

    def get(self, metadata: BlobMetadata) -> bytes:
        """The bytes of the blob stored at ``metadata``."""
        info = self._fnm.file_info(metadata.file_key)
        with self._cache_lock:
            entry = self._readers.get(info.file_key)
            if entry is None:
                data_file = _DataFile(info.file_name_with_path, writable=False)
                self._readers[info.file_key] = _CacheEntry(data_file, True)
            else:
                self._readers.move_to_end(info.file_key)
                data_file = entry.file
            blob, _ = _read_blob_at(data_file.view, metadata.offset, data_file.path)
            return blob

    def unmap_lru_data_files(self) -> None:
        """Unmap least recently used data files until at most the cache size remain."""
        with self._cache_lock:
            for key in list(self._readers):
                if len(self._readers) <= self._cache_size:
                    break
                entry = self._readers[key]
                if entry.evictable:
                    del self._readers[key]
                    entry.file.close()

    def close(self) -> None:
        """Record the current file's length and release every mapped file."""
        if self._closed:
            return
        self._closed = True
        try:
            self._fnm.update_data_file_length(
                self._current_info.file_key, self._current.write_offset
            )
        finally:
            with self._cache_lock:
                for entry in self._readers.values():
                    entry.file.close()
                self._readers.clear()
            self._current.close()
            self._fnm.close()

    def __enter__(self) -> BlobManager:
        return self

    def __exit__(self, *args) -> None:
        self.close()


class BlobIterator:
    """Reads the blobs of one data file sequentially, from its start."""

    def __init__(self, file_info: FileInfo) -> None:
        self._info = file_info
        self._position = 0
        self._file: Optional[_DataFile] = None
        if file_info.data_length > 0:
            self._file = _DataFile(file_info.file_name_with_path, writable=False)

    def next_batch(self, size: int) -> list[tuple[bytes, BlobMetadata]]:
        """Up to ``size`` further blobs with their metadata; empty at the end."""
        if size <= 0:
            raise InvalidArgumentError("Argument size must be greater than 0.")
        batch: list[tuple[bytes, BlobMetadata]] = []
        if self._file is None:
            return batch
        while len(batch) < size and self._position < self._info.data_length:
            position = self._position
            blob, self._position = _read_blob_at(
                self._file.view, position, self._info.file_name_with_path
            )
            batch.append((blob, BlobMetadata(self._info.file_key, position)))
        return batch

    def __iter__(self) -> Iterator[tuple[bytes, BlobMetadata]]:
        while batch := self.next_batch(1000):
            yield from batch

    def close(self) -> None:
        """Release the mapped file."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> BlobIterator:
        return self

    def __exit__(self, *args) -> None:
        self.close()