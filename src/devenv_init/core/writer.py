"""Serialization of a patched line buffer back to disk."""
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Union

from filelock import Timeout

from ..errors import FileAccessError
from .safety import SafeFileOperation, safe_edit_context

logger = logging.getLogger(__name__)


def serialize(lines: list[str], pending: list[str]) -> str:
    """Join the buffer and append pending ``key=value`` entries.

    Args:
        lines: Line buffer without line breaks
        pending: Entries to place after the existing content, in order

    Returns:
        Full file text
    """
    content = "\n".join(lines)
    if pending and content and not content.endswith("\n"):
        content += "\n"
    for entry in pending:
        content += f"{entry}\n"
    return content


@contextmanager
def locked_edit(
    file_path: Union[str, Path], timeout: int = 30
) -> Iterator[SafeFileOperation]:
    """Hold the file's lock for a whole read-modify-write.

    Args:
        file_path: File being edited
        timeout: Lock timeout in seconds

    Yields:
        SafeFileOperation to read under and write through

    Raises:
        FileAccessError: If the lock, temp file or replace fails
    """
    file_path = Path(file_path)
    if not file_path.parent.is_dir():
        raise FileAccessError(file_path, "parent directory does not exist")

    try:
        with safe_edit_context(file_path, timeout) as safe_op:
            yield safe_op
    except FileAccessError:
        raise
    except Timeout as e:
        logger.error(f"Timed out waiting for lock on {file_path}")
        raise FileAccessError(file_path, f"lock timeout after {timeout}s") from e
    except OSError as e:
        logger.error(f"Failed to write {file_path}: {e}")
        raise FileAccessError(file_path, f"cannot write: {e}") from e


def write_locked(safe_op: SafeFileOperation, content: str, encoding: str = "utf-8"):
    """Write ``content`` to a temp file and move it over the locked file."""
    temp_file = safe_op.get_temp_file()
    with open(temp_file, "w", encoding=encoding, newline="") as f:
        f.write(content)
    safe_op.atomic_replace(temp_file)


def write_text_atomic(
    file_path: Union[str, Path],
    content: str,
    encoding: str = "utf-8",
    timeout: int = 30,
):
    """Replace a file's contents through a temp file and ``os.replace``.

    Args:
        file_path: Destination path
        content: Text to write
        encoding: File encoding
        timeout: Lock timeout in seconds

    Raises:
        FileAccessError: If the lock, temp file or replace fails
    """
    with locked_edit(file_path, timeout) as safe_op:
        write_locked(safe_op, content, encoding)
