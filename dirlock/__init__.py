"""Exclusive advisory locking for data directories"""

from .errors import (
    DataDirInUseError,
    DirLockError,
    LockAcquisitionError,
    LockContendedError,
    LockReleaseError,
    LockStateError,
)
from .guard import DataDirGuard, probe
from .lock import LOCKING_SUPPORTED, ExclusiveFileLock, LockState

__all__ = [
    'DataDirGuard',
    'DataDirInUseError',
    'DirLockError',
    'ExclusiveFileLock',
    'LOCKING_SUPPORTED',
    'LockAcquisitionError',
    'LockContendedError',
    'LockReleaseError',
    'LockState',
    'LockStateError',
    'probe',
]
