"""In-place patching of flat key=value configuration files."""
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Union

from ..core.line_store import LineStore
from ..core.maintainer import IndexMaintainer
from ..core.planner import ActionKind, ConfigEdit, PlannedAction, resolve
from ..core.writer import locked_edit, serialize, write_locked

logger = logging.getLogger(__name__)


def _run_batch(
    store: LineStore, edits: Iterable[ConfigEdit]
) -> tuple[str, list[PlannedAction]]:
    maintainer = IndexMaintainer(store)
    actions = []
    for edit in edits:
        action = resolve(edit, store.keys, store.sections)
        maintainer.apply(action)
        actions.append(action)
    return serialize(store.lines, maintainer.pending), actions


class ConfigFileEditor:
    """Editor for TOML/INI-style configuration files.

    Only flat ``key=value`` lines, ``[section]`` headers and ``#`` comments
    are understood. Everything else passes through verbatim, as do comments
    and untouched lines.
    """

    def __init__(
        self, file_path: Union[str, Path], encoding: str = "utf-8", timeout: int = 30
    ):
        """Initialize config file editor.

        Args:
            file_path: Path to configuration file
            encoding: File encoding
            timeout: Lock timeout in seconds used while writing
        """
        self.file_path = Path(file_path)
        self.encoding = encoding
        self.timeout = timeout

    def preview(self, edits: Iterable[ConfigEdit]) -> str:
        """Return the text ``apply`` would write, without touching the file."""
        store = LineStore.load(self.file_path, self.encoding)
        content, _ = _run_batch(store, edits)
        return content

    def apply(self, edits: Iterable[ConfigEdit]) -> list[PlannedAction]:
        """Apply an ordered batch of edits and write the file once.

        The lock is held from the read until the replacement lands, so
        concurrent patches of the same file apply one after the other.

        Args:
            edits: Edits applied strictly in order

        Returns:
            The action taken for each edit

        Raises:
            FileAccessError: If the file cannot be read or written
        """
        with locked_edit(self.file_path, self.timeout) as safe_op:
            store = LineStore.load(self.file_path, self.encoding)
            content, actions = _run_batch(store, edits)

            if all(action.kind is ActionKind.NOOP for action in actions):
                logger.info(f"No changes for {self.file_path}")
                return actions

            write_locked(safe_op, content, self.encoding)

        changed = sum(1 for action in actions if action.kind is not ActionKind.NOOP)
        logger.info(f"Applied {changed} of {len(actions)} edits to {self.file_path}")
        return actions


def apply_config_patch(
    file_path: Union[str, Path], edits: Iterable[ConfigEdit], **kwargs
) -> list[PlannedAction]:
    """Patch a configuration file in place.

    Args:
        file_path: Path to configuration file
        edits: Ordered batch of edits
        **kwargs: Passed to ``ConfigFileEditor``

    Returns:
        The action taken for each edit
    """
    return ConfigFileEditor(file_path, **kwargs).apply(edits)


def patch_text(text: str, edits: Iterable[ConfigEdit]) -> str:
    """Apply a batch of edits to configuration text held in memory."""
    content, _ = _run_batch(LineStore.from_text(text), edits)
    return content
