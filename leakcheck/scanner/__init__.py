"""Source file discovery."""

from .file_scanner import (
    FileScanner,
    NotFoundError,
    compile_glob,
    DEFAULT_FILE_GLOB,
    DEFAULT_EXCLUDE_DIRS,
)

__all__ = [
    "FileScanner",
    "NotFoundError",
    "compile_glob",
    "DEFAULT_FILE_GLOB",
    "DEFAULT_EXCLUDE_DIRS",
]
