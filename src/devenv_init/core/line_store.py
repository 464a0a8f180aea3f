"""Line buffer and position indexes for flat key=value configuration files."""
import logging
import re
from enum import Enum
from pathlib import Path
from typing import NamedTuple, Optional, Union

from ..errors import FileAccessError
from .index import PositionIndex

logger = logging.getLogger(__name__)

SECTION_PATTERN = re.compile(r"^\s*\[([^\]]+)\]\s*$")


class LineKind(Enum):
    COMMENT = "comment"
    SECTION = "section"
    KEY_VALUE = "key_value"
    OTHER = "other"


class ClassifiedLine(NamedTuple):
    """A raw line together with what it was recognized as."""
    kind: LineKind
    raw: str
    name: Optional[str] = None


def classify_line(raw: str) -> ClassifiedLine:
    """Classify a single line of a configuration file.

    Comments are checked first, then section headers, then ``key=value``.
    Anything else is returned as OTHER and left untouched by the patcher.
    """
    if raw.lstrip().startswith("#"):
        return ClassifiedLine(LineKind.COMMENT, raw)

    section_match = SECTION_PATTERN.match(raw)
    if section_match:
        return ClassifiedLine(LineKind.SECTION, raw, section_match.group(1).strip())

    key, sep, _ = raw.partition("=")
    if sep and key:
        return ClassifiedLine(LineKind.KEY_VALUE, raw, key.strip())

    return ClassifiedLine(LineKind.OTHER, raw)


class LineStore:
    """Mutable line buffer with key and section position indexes.

    The indexes are built by a single scan when the store is created. Later
    structural edits keep them valid through ``PositionIndex.shift_after``
    rather than by rescanning.
    """

    def __init__(self, lines: list[str]):
        self.lines = list(lines)
        self.keys = PositionIndex()
        self.sections = PositionIndex()
        self._build_index()

    @classmethod
    def from_text(cls, text: str) -> "LineStore":
        return cls(text.split("\n"))

    @classmethod
    def load(cls, file_path: Union[str, Path], encoding: str = "utf-8") -> "LineStore":
        """Read a configuration file into a new store.

        Args:
            file_path: Path to the configuration file
            encoding: File encoding

        Returns:
            LineStore over the file's lines

        Raises:
            FileAccessError: If the file cannot be opened or decoded
        """
        file_path = Path(file_path)
        try:
            with open(file_path, encoding=encoding, newline="") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {file_path}: {e}")
            raise FileAccessError(file_path, f"cannot read: {e}") from e

        store = cls.from_text(text)
        logger.debug(
            f"Loaded {file_path}: {len(store.lines)} lines, "
            f"{len(store.keys)} keys, {len(store.sections)} sections"
        )
        return store

    def _build_index(self):
        # Later duplicates overwrite earlier ones.
        for position, raw in enumerate(self.lines):
            line = classify_line(raw)
            if line.kind is LineKind.SECTION:
                self.sections[line.name] = position
            elif line.kind is LineKind.KEY_VALUE:
                self.keys[line.name] = position

    def classified(self) -> list[ClassifiedLine]:
        """Classify every line currently in the buffer."""
        return [classify_line(raw) for raw in self.lines]

    def __len__(self) -> int:
        return len(self.lines)
