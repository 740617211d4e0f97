"""Custom errors for dirlock"""

from typing import Optional


class DirLockError(Exception):
    """Base dirlock exception"""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class LockAcquisitionError(DirLockError):
    """Raised when the lock primitive cannot be invoked (bad path, permission, I/O)"""


class LockReleaseError(DirLockError):
    """Raised when releasing a held lock fails at the OS level"""


class LockStateError(DirLockError):
    """Raised when a handle is used outside its lifecycle, e.g. acquired after release"""


class LockContendedError(DirLockError):
    """Raised by the raising helpers when another holder owns the lock"""


class DataDirInUseError(LockContendedError):
    """Raised when a data directory is already opened by another process"""
