"""Storage core of a document database: blob files, integer bitmap indexes, delete vectors and SQLite-backed metadata."""

__version__ = "0.1.0"