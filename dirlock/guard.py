"""Single-process ownership of a data directory"""

import logging
import os
from typing import Optional, Union

from .errors import DataDirInUseError, LockAcquisitionError, LockReleaseError
from .lock import ExclusiveFileLock
from .utils import DEFAULT_LOCK_NAME, resolve_lock_path

logger = logging.getLogger(__name__)


class DataDirGuard:
    """Holds the lock file of a data directory for as long as it is open.

    ``open`` fails fast with ``DataDirInUseError`` when another process
    already owns the directory. ``close`` releases exactly once and only logs
    release failures, so it can sit in any shutdown or unwind path.
    """

    def __init__(self, datadir: Union[str, os.PathLike], lock_name: str = DEFAULT_LOCK_NAME, create: bool = True):
        self.lock_path = resolve_lock_path(datadir, lock_name)
        self.datadir = os.path.dirname(self.lock_path)
        self.create = create
        self.lock: Optional[ExclusiveFileLock] = None

    @property
    def is_open(self) -> bool:
        return self.lock is not None and self.lock.locked

    def open(self):
        """Create the data directory if needed and take its lock"""
        if self.is_open:
            return

        if self.create:
            try:
                os.makedirs(self.datadir, exist_ok=True)
            except OSError as e:
                raise LockAcquisitionError(f"cannot create data directory {self.datadir}: {e.strerror}", self.lock_path) from e

        lock = ExclusiveFileLock(self.lock_path)
        if not lock.try_acquire():
            raise DataDirInUseError(f"datadir already used by another process: {self.datadir}", self.lock_path)

        self.lock = lock
        logger.info(f"locked data directory {self.datadir}")

    def close(self):
        """Release the data directory lock"""
        if self.lock is None:
            return

        lock, self.lock = self.lock, None
        try:
            lock.release()
        except LockReleaseError as e:
            logger.warning(f"failed to release data directory lock: {e}")
            return
        logger.info(f"unlocked data directory {self.datadir}")

    def __enter__(self) -> 'DataDirGuard':
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def probe(datadir: Union[str, os.PathLike], lock_name: str = DEFAULT_LOCK_NAME) -> bool:
    """Check whether another owner currently holds the data directory lock.

    Nothing is created when the lock file does not exist yet. A free lock is
    taken and dropped again for a moment, so an engine starting at the same
    instant may see the directory as in use.
    """
    lock_path = resolve_lock_path(datadir, lock_name)
    if not os.path.exists(lock_path):
        return False

    lock = ExclusiveFileLock(lock_path)
    try:
        acquired = lock.try_acquire()
    finally:
        lock.release()
    return not acquired
