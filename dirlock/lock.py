"""Exclusive advisory file lock for guarding a data directory

The backend is picked once, when this module is imported:

* POSIX: ``fcntl.flock`` with ``LOCK_EX | LOCK_NB``
* Windows: ``msvcrt.locking`` with ``LK_NBLCK`` on the first byte
* emscripten / wasi: no process-level file locking exists there, so the
  lock is a no-op that always reports success. ``LOCKING_SUPPORTED`` is
  ``False`` on those platforms and callers must not rely on exclusivity.

flock locks belong to the open file description, so two handles in the same
process on the same path contend with each other just like two processes.
"""

import enum
import errno
import logging
import os
import sys
from typing import Optional, Union

from .errors import LockAcquisitionError, LockContendedError, LockReleaseError, LockStateError

logger = logging.getLogger(__name__)

_UNSUPPORTED_PLATFORMS = ('emscripten', 'wasi')
_CONTENDED_ERRNOS = {errno.EAGAIN, errno.EWOULDBLOCK, errno.EACCES}

if sys.platform in _UNSUPPORTED_PLATFORMS:
    LOCKING_SUPPORTED = False

    def _open_lock_file(path: str) -> Optional[int]:
        return None

    def _try_lock(fd: Optional[int]) -> bool:
        return True

    def _unlock(fd: Optional[int]):
        pass

elif os.name == 'nt':
    import msvcrt

    LOCKING_SUPPORTED = True
    _CONTENDED_ERRNOS.add(errno.EDEADLOCK)

    def _open_lock_file(path: str) -> Optional[int]:
        return os.open(path, os.O_RDWR | os.O_CREAT | os.O_BINARY, 0o600)

    def _try_lock(fd: Optional[int]) -> bool:
        try:
            os.lseek(fd, 0, os.SEEK_SET)
            msvcrt.locking(fd, msvcrt.LK_NBLCK, 1)
        except OSError as e:
            if e.errno in _CONTENDED_ERRNOS:
                return False
            raise
        return True

    def _unlock(fd: Optional[int]):
        os.lseek(fd, 0, os.SEEK_SET)
        msvcrt.locking(fd, msvcrt.LK_UNLCK, 1)

else:
    import fcntl

    LOCKING_SUPPORTED = True

    def _open_lock_file(path: str) -> Optional[int]:
        return os.open(path, os.O_RDWR | os.O_CREAT, 0o600)

    def _try_lock(fd: Optional[int]) -> bool:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            if e.errno in _CONTENDED_ERRNOS:
                return False
            raise
        return True

    def _unlock(fd: Optional[int]):
        fcntl.flock(fd, fcntl.LOCK_UN)


def _close(fd: Optional[int]):
    if fd is not None:
        os.close(fd)


class LockState(enum.Enum):
    """Lifecycle of a lock handle"""

    UNACQUIRED = 'unacquired'
    HELD = 'held'
    RELEASED = 'released'


class ExclusiveFileLock:
    """Non-blocking exclusive lock on a single path.

    Constructing a handle never touches the filesystem. ``try_acquire``
    makes one immediate attempt and returns ``False`` when someone else holds
    the lock; ``release`` is safe to call from any cleanup path. A released
    handle cannot be acquired again, construct a new one instead.

    Calls on one handle are not serialized against each other; the owner is
    expected to drive it from a single control-flow path.
    """

    def __init__(self, path: Union[str, os.PathLike]):
        path = os.fspath(path)
        if not path:
            raise ValueError('lock path must not be empty')
        self._path = os.path.abspath(path)
        self._fd: Optional[int] = None
        self._state = LockState.UNACQUIRED
        if not LOCKING_SUPPORTED:
            logger.warning(f"file locking is not supported on {sys.platform}, {self._path} is not protected")

    @property
    def path(self) -> str:
        return self._path

    @property
    def state(self) -> LockState:
        return self._state

    @property
    def locked(self) -> bool:
        return self._state is LockState.HELD

    def try_acquire(self) -> bool:
        """Try once, without blocking, to take exclusive ownership of the path"""
        if self._state is LockState.HELD:
            return True
        if self._state is LockState.RELEASED:
            raise LockStateError(f"lock {self._path} was released, create a new handle to lock it again", self._path)

        try:
            fd = _open_lock_file(self._path)
        except OSError as e:
            raise LockAcquisitionError(f"cannot open lock file {self._path}: {e.strerror}", self._path) from e

        try:
            acquired = _try_lock(fd)
        except OSError as e:
            _close(fd)
            raise LockAcquisitionError(f"cannot lock {self._path}: {e.strerror}", self._path) from e

        if not acquired:
            _close(fd)
            logger.debug(f"lock {self._path} is held by another owner")
            return False

        self._fd = fd
        self._state = LockState.HELD
        logger.debug(f"acquired lock {self._path}")
        return True

    def acquire_or_fail(self):
        """Acquire the lock or raise LockContendedError immediately"""
        if not self.try_acquire():
            raise LockContendedError(f"lock {self._path} is held by another process", self._path)

    def release(self):
        """Release the lock; a no-op unless the lock is held"""
        if self._state is not LockState.HELD:
            self._state = LockState.RELEASED
            return

        fd, self._fd = self._fd, None
        self._state = LockState.RELEASED
        try:
            try:
                _unlock(fd)
            finally:
                _close(fd)
        except OSError as e:
            raise LockReleaseError(f"failed to release lock {self._path}: {e.strerror}", self._path) from e
        logger.debug(f"released lock {self._path}")

    def __enter__(self) -> 'ExclusiveFileLock':
        self.acquire_or_fail()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()

    def __repr__(self) -> str:
        return f"ExclusiveFileLock(path={self._path!r}, state={self._state.value})"
