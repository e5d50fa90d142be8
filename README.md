# jonoondb

The storage layer of a document database, as a Python library. Documents are
kept as blobs in data files with a size cap. The data files and the collection
catalogue are tracked in a SQLite database. Bitmap indexes answer integer
comparison and range queries.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `jonoondb.blob_manager`
  - `BlobManager(file_name_manager, max_data_file_size, synchronous)` writes
    blobs into preallocated, memory-mapped data files. Blobs can be LZ4
    compressed. When a blob would not fit in the current file, it moves on to
    a new one.
  - `put` and `multi_put` return `BlobMetadata`, which holds a file key and an
    offset. `get` reads the blob back from it.
  - `unmap_lru_data_files` releases read-only mappings that have not been used
    recently.
  - `BlobIterator(file_info)` walks every blob in one data file, either with
    `next_batch(size)` or by iterating over it.
  - Each blob is preceded by a header. The header is one byte holding the
    version in the high nibble and the compression flag in the low bit. Then
    comes the blob size as a varint and, for compressed blobs only, the
    compressed size as a varint.
  - The helpers `encode_varint`, `decode_varint`, `varint_size`,
    `header_size`, `max_compressed_size`, `BlobHeader.encode` and
    `decode_blob_header` are public.
- `jonoondb.filename_manager`
  - `FileNameManager` names a collection's data files
    (`<db_name>_<collection>.<key>`) and records how many bytes each one
    holds, in the `CollectionDataFile` table of `<db_path>/<db_name>.dat`.
  - Its methods are `current_data_file_info`, `next_data_file_info`,
    `update_data_file_length` and `file_info`. They return `FileInfo`.
- `jonoondb.metadata`
  - `DatabaseMetadataManager` records collections, their schemas and their
    index definitions. `add_collection` writes a collection and its indexes
    in one transaction.
  - `existing_collections` returns `CollectionMetadata` objects ordered by
    name, each with its indexes and data files.
- `jonoondb.integer_indexer`
  - `IntegerBitmapIndexer` maps each integer value to the set of document ids
    that hold it.
  - `filter(constraint)` supports `EQUAL`, `LESS_THAN`, `LESS_THAN_EQUAL`,
    `GREATER_THAN` and `GREATER_THAN_EQUAL`, with integer or double operands.
    `MATCH` raises `JonoonDBError`.
  - `filter_range(lower, upper)` combines a lower and an upper bound.
- `jonoondb.delete_vector`
  - `DeleteVector` keeps the deleted document ids of a collection in the
    `CollectionDeleteVector` table, so they survive a restart.
  - `live_ids()` gives the ids below `next_document_id` that are not deleted.
- `jonoondb.buffer`
  - `Buffer` is a byte buffer with a fixed capacity and a separate fill
    length. Buffers compare byte by byte.
- `jonoondb.index_info`
  - `IndexInfo`, `IndexType` and `SchemaType`.
  - `to_index_type` and `to_schema_type` reject unknown values.
- `jonoondb.fields`
  - `FieldType` and `field_type_name`.
- `jonoondb.files`
  - `read_file` reads a whole file.
  - `fast_allocate` creates a new file of a given size and fails if the file
    already exists.
- `jonoondb.id_generator`
  - `DocumentIDGenerator.reserve(count)` hands out consecutive ids and is
    safe to call from several threads.
- `jonoondb.id_sequence`
  - `id_batches(ids, batch_size)` yields sorted ids in lists of at most
    `batch_size`.
- `jonoondb.collection_registry`
  - `CollectionRegistry` maps names to collections. `get_registry()` returns
    the one shared by the process.
- `jonoondb.errors`
  - Every error raised is a subclass of `JonoonDBError`, for example
    `InvalidArgumentError`, `SQLError`, `FileIOError` and
    `CollectionAlreadyExistError`.

## Examples

Storing and reading back a blob:

```python
from pathlib import Path

from jonoondb.blob_manager import BlobManager
from jonoondb.buffer import Buffer
from jonoondb.filename_manager import FileNameManager

Path("data").mkdir(exist_ok=True)

names = FileNameManager("data", "mydb", "people", True)
with BlobManager(names, 1024 * 1024, True) as blobs:
    meta = blobs.put(Buffer(b"hello world"), compress=True)
    assert blobs.get(meta) == b"hello world"
```

Closing the `BlobManager` also closes the `FileNameManager` it was given.

An integer index:

```python
from jonoondb.fields import FieldType
from jonoondb.index_info import IndexInfo, IndexType
from jonoondb.integer_indexer import (
    Constraint,
    IndexConstraintOperator,
    IntegerBitmapIndexer,
    OperandType,
)

info = IndexInfo("age_idx", IndexType.INVERTED_COMPRESSED_BITMAP, "age", True)
index = IntegerBitmapIndexer(info, FieldType.INT32)
index.insert(0, 30)
index.insert(1, 42)

older = Constraint("age", IndexConstraintOperator.GREATER_THAN, OperandType.INTEGER, 35)
assert index.filter(older) == {1}
```

## What the package does not do

These are the storage building blocks only. The package has no database
object that ties them together. It has no query language: no SELECT or
DELETE statements and no result sets. It does not parse document schemas or
read field values out of documents. When you call
`IntegerBitmapIndexer.insert`, you pass the value yourself. There is no
command-line tool and no server.