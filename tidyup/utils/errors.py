# Error types raised by the resolver and the engine

from pathlib import Path
from typing import Optional, Union


class TidyError(Exception):
    """Base class for all tidyup errors"""
    pass


class ConfigError(TidyError):
    """Malformed command-line arguments (unknown flag, missing value)"""
    pass


class HelpRequested(TidyError):
    """Raised by the resolver when -h/--help is seen"""
    pass


class TidyIOError(TidyError):
    """
    Fatal filesystem failure

    Carries the offending path and the underlying OSError. The run stops
    at the first one of these.
    """

    def __init__(self, path: Union[str, Path], cause: Optional[BaseException] = None,
                 action: str = "access"):
        self.path = Path(path)
        self.cause = cause
        self.action = action
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        message = f"cannot {self.action} '{self.path}'"
        if self.cause is not None:
            reason = getattr(self.cause, "strerror", None) or str(self.cause)
            message += f": {reason}"
        return message
