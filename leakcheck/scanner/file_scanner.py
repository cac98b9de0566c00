"""File discovery for the leak check."""

from pathlib import Path
from typing import Iterator, List, Optional, Pattern, Set
import logging
import re

from ..models.result import ScanWarning
from ..models.rule import PatternError

logger = logging.getLogger(__name__)


DEFAULT_FILE_GLOB = "src/**/*.rs"
DEFAULT_EXCLUDE_DIRS = {".git", "target", "node_modules"}


class NotFoundError(Exception):
    """Raised when the directory to scan does not exist."""
    pass


def compile_glob(glob: str) -> Pattern[str]:
    """Translate a path glob into a regular expression.

    Supports ``*``, ``?``, ``[...]``, ``{a,b}`` and ``**`` (zero or more
    whole directories). The result is meant for ``fullmatch`` against a
    POSIX-style relative path.

    Args:
        glob: Glob such as ``src/**/*.rs``

    Returns:
        Compiled regular expression

    Raises:
        PatternError: If the glob is malformed
    """
    parts = []
    i = 0
    depth = 0
    n = len(glob)

    while i < n:
        c = glob[i]
        if c == "*":
            if glob.startswith("**", i):
                at_start = i == 0 or glob[i - 1] == "/"
                i += 2
                if at_start and glob.startswith("/", i):
                    # "**/" matches zero or more leading directories
                    parts.append("(?:[^/]*/)*")
                    i += 1
                else:
                    parts.append(".*")
                continue
            parts.append("[^/]*")
        elif c == "?":
            parts.append("[^/]")
        elif c == "[":
            end = glob.find("]", i + 2 if glob.startswith("[!", i) else i + 1)
            if end == -1:
                raise PatternError(f"Invalid file glob {glob!r}: unclosed '['")
            body = glob[i + 1:end]
            if body.startswith("!"):
                body = "^" + body[1:]
            parts.append("[" + body.replace("\\", "\\\\") + "]")
            i = end
        elif c == "{":
            depth += 1
            parts.append("(?:")
        elif c == "}" and depth:
            depth -= 1
            parts.append(")")
        elif c == "," and depth:
            parts.append("|")
        else:
            parts.append(re.escape(c))
        i += 1

    if depth:
        raise PatternError(f"Invalid file glob {glob!r}: unclosed '{{'")

    try:
        return re.compile("".join(parts))
    except re.error as e:
        raise PatternError(f"Invalid file glob {glob!r}: {e}") from e


class FileScanner:
    """Walk a directory tree and yield source files matching a glob.

    Entries are visited in lexicographic order at every level, so the
    sequence of files is stable across runs over an unchanged tree.
    Symbolic links are skipped.
    """

    def __init__(
        self,
        root: Path,
        pattern: str = DEFAULT_FILE_GLOB,
        exclude_dirs: Optional[Set[str]] = None,
    ):
        """Initialize the scanner.

        Args:
            root: Directory to scan
            pattern: Glob matched against each file's path relative to root
            exclude_dirs: Directory names that are never descended into

        Raises:
            PatternError: If the glob is malformed
        """
        self.root = Path(root)
        self.pattern = pattern
        self.exclude_dirs = DEFAULT_EXCLUDE_DIRS if exclude_dirs is None else set(exclude_dirs)
        self._regex = compile_glob(pattern)
        self.warnings: List[ScanWarning] = []

    def scan(self) -> Iterator[Path]:
        """Yield matching regular files under the root.

        Yields:
            Paths of matching files

        Raises:
            NotFoundError: If the root does not exist or is not a directory
        """
        if not self.root.is_dir():
            raise NotFoundError(f"Directory not found: {self.root}")

        self.warnings = []
        logger.debug(f"Scanning {self.root} for '{self.pattern}'")
        yield from self._walk(self.root)

    def matches(self, path: Path) -> bool:
        """Check whether a file path matches the configured glob."""
        relative = path.relative_to(self.root).as_posix()
        return self._regex.fullmatch(relative) is not None

    def _walk(self, current: Path) -> Iterator[Path]:
        try:
            entries = sorted(current.iterdir(), key=lambda p: p.name)
        except OSError as e:
            self._warn(current, f"cannot list directory: {e}")
            return

        for entry in entries:
            try:
                # symlinks are not followed, so no file is read twice
                if entry.is_symlink():
                    logger.debug(f"Skipping symlink {entry}")
                    continue
                if entry.is_dir():
                    if entry.name in self.exclude_dirs:
                        continue
                    yield from self._walk(entry)
                elif entry.is_file() and self.matches(entry):
                    yield entry
            except OSError as e:
                self._warn(entry, f"cannot access entry: {e}")

    def _warn(self, path: Path, message: str) -> None:
        logger.warning(f"Skipping {path}: {message}")
        self.warnings.append(ScanWarning(path=str(path), message=message))
