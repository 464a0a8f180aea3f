"""Core configuration patching modules."""

from .index import PositionIndex
from .line_store import ClassifiedLine, LineKind, LineStore, classify_line
from .maintainer import IndexMaintainer
from .planner import ActionKind, ConfigEdit, PlannedAction, format_value, resolve
from .safety import (
    PerformanceMonitor,
    SafeFileOperation,
    lock_path_for,
    safe_edit_context,
)
from .writer import locked_edit, serialize, write_locked, write_text_atomic

__all__ = [
    # Line buffer and indexes
    'LineStore',
    'LineKind',
    'ClassifiedLine',
    'classify_line',
    'PositionIndex',

    # Planning and index maintenance
    'ConfigEdit',
    'ActionKind',
    'PlannedAction',
    'format_value',
    'resolve',
    'IndexMaintainer',

    # Writing
    'serialize',
    'locked_edit',
    'write_locked',
    'write_text_atomic',

    # Safety mechanisms
    'SafeFileOperation',
    'safe_edit_context',
    'PerformanceMonitor',
    'lock_path_for',
]
