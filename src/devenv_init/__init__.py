"""Mode-aware configuration patching and bootstrap for a local development network."""

from .bootstrap import (
    Announcer,
    DeploymentMode,
    InitOptions,
    Toolchain,
    init,
    lightweight_init,
    reinit,
    update_config,
)
from .core import ConfigEdit, LineStore, PerformanceMonitor, safe_edit_context
from .errors import DevEnvError, FileAccessError, StepError
from .formats import ConfigFileEditor, apply_config_patch, patch_text

__version__ = "0.1.0"

__all__ = [
    # Config patching
    "ConfigEdit",
    "ConfigFileEditor",
    "LineStore",
    "apply_config_patch",
    "patch_text",
    "safe_edit_context",
    "PerformanceMonitor",
    # Bootstrap
    "Announcer",
    "DeploymentMode",
    "InitOptions",
    "Toolchain",
    "init",
    "reinit",
    "lightweight_init",
    "update_config",
    # Errors
    "DevEnvError",
    "FileAccessError",
    "StepError",
]
