"""Apply planned actions to a line store and keep its indexes consistent."""
import logging

from .line_store import LineStore
from .planner import ActionKind, PlannedAction

logger = logging.getLogger(__name__)


def _match_ending(line: str, reference: str) -> str:
    # Lines are split on "\n"; a CRLF file keeps its "\r" on every line.
    if reference.endswith("\r"):
        return f"{line}\r"
    return line


class IndexMaintainer:
    """Mutates a LineStore one action at a time.

    Lines destined for the end of the file are collected in ``pending`` and
    never enter the buffer or the indexes. Written lines take the line
    ending of the line they replace or follow.
    """

    def __init__(self, store: LineStore):
        self.store = store
        self.pending: list[str] = []

    def apply(self, action: PlannedAction):
        """Apply an action and shift any positions it invalidated.

        Args:
            action: Action produced by ``planner.resolve``
        """
        lines = self.store.lines

        if action.kind is ActionKind.REPLACE:
            lines[action.position] = _match_ending(action.line, lines[action.position])

        elif action.kind is ActionKind.DELETE:
            del lines[action.position]
            self.store.keys.discard(action.key)
            self.store.keys.shift_after(action.position, -1)
            self.store.sections.shift_after(action.position, -1)

        elif action.kind is ActionKind.INSERT:
            header = action.position - 1
            lines.insert(action.position, _match_ending(action.line, lines[header]))
            # The inserted key is not indexed; a second insert of the same
            # key within one batch adds another line.
            self.store.keys.shift_after(header, 1)
            self.store.sections.shift_after(header, 1)

        elif action.kind is ActionKind.APPEND:
            reference = lines[0] if lines else ""
            self.pending.append(_match_ending(action.line, reference))
