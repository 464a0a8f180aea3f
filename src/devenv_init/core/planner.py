"""Resolution of configuration edits into concrete buffer actions."""
import logging
from enum import Enum
from typing import NamedTuple, Optional, Union

from .index import PositionIndex

logger = logging.getLogger(__name__)

Value = Union[str, int, float, bool, None]


class ConfigEdit(NamedTuple):
    """One requested change to a configuration file.

    A ``value`` of None removes the key if present. A ``section`` of None
    means the key is not scoped to a section header.
    """
    key: str
    value: Value = None
    section: Optional[str] = None

    def render(self) -> str:
        return f"{self.key}={format_value(self.value)}"


class ActionKind(Enum):
    REPLACE = "replace"
    DELETE = "delete"
    INSERT = "insert"
    APPEND = "append"
    NOOP = "noop"


class PlannedAction(NamedTuple):
    """Outcome of resolving one edit against the current indexes."""
    kind: ActionKind
    key: str
    position: Optional[int] = None
    line: Optional[str] = None


def format_value(value: Value) -> str:
    """Render a value the way it is written into the file."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def resolve(
    edit: ConfigEdit, keys: PositionIndex, sections: PositionIndex
) -> PlannedAction:
    """Decide what a single edit does to the buffer.

    Args:
        edit: Requested change
        keys: Current key positions
        sections: Current section header positions

    Returns:
        PlannedAction describing the mutation. INSERT positions point at the
        line the new entry will occupy, directly below the section header.
    """
    key_position = keys.get(edit.key)

    if key_position is not None:
        if edit.value is not None:
            return PlannedAction(ActionKind.REPLACE, edit.key, key_position, edit.render())
        return PlannedAction(ActionKind.DELETE, edit.key, key_position)

    if edit.value is None:
        return PlannedAction(ActionKind.NOOP, edit.key)

    section_position = sections.get(edit.section)
    if section_position is not None:
        return PlannedAction(
            ActionKind.INSERT, edit.key, section_position + 1, edit.render()
        )

    if edit.section is not None:
        logger.debug(f"Section [{edit.section}] not found, appending {edit.key}")
    return PlannedAction(ActionKind.APPEND, edit.key, None, edit.render())
