"""Exception types raised by devenv_init."""


class DevEnvError(Exception):
    """Base class for developer-environment bootstrap errors."""


class FileAccessError(DevEnvError, OSError):
    """A configuration file could not be read or written."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class StepError(DevEnvError):
    """An external bootstrap step failed."""

    def __init__(self, step: str, reason: str):
        self.step = step
        self.reason = reason
        super().__init__(f"{step} failed: {reason}")
