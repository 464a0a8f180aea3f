"""File format-specific editors."""

from .config_file import ConfigFileEditor, apply_config_patch, patch_text

__all__ = [
    "ConfigFileEditor",
    "apply_config_patch",
    "patch_text",
]
