[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "jonoondb"
version = "0.1.0"
description = "Storage core of a document database: blob files, integer bitmap indexes, delete vectors and SQLite-backed metadata"
requires-python = ">=3.10"
keywords = ["database", "document-store", "bitmap-index", "blob-storage", "sqlite", "lz4"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
]
dependencies = [
    "lz4",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["jonoondb"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
