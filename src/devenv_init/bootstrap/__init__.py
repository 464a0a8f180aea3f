"""Developer-environment bootstrap pipelines."""

from .announcer import Announcer
from .modes import DeploymentMode, mode_config_targets
from .pipeline import InitOptions, init, lightweight_init, reinit, update_config
from .toolchain import Toolchain

__all__ = [
    'Announcer',
    'DeploymentMode',
    'mode_config_targets',
    'InitOptions',
    'init',
    'reinit',
    'lightweight_init',
    'update_config',
    'Toolchain',
]
