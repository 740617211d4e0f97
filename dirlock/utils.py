"""Utility functions for dirlock"""

import os
from typing import Union

DEFAULT_LOCK_NAME = 'LOCK'


def validate_lock_name(lock_name: str) -> str:
    """Check that the lock file name is a bare file name inside the data directory"""
    if not isinstance(lock_name, str):
        raise ValueError(f"lock file name must be a string: {lock_name!r}")
    if not lock_name or lock_name in (os.curdir, os.pardir):
        raise ValueError(f"invalid lock file name: {lock_name!r}")
    separators = {os.sep, os.altsep} - {None}
    if any(sep in lock_name for sep in separators):
        raise ValueError(f"lock file name must not contain a path separator: {lock_name!r}")
    return lock_name


def resolve_lock_path(datadir: Union[str, os.PathLike], lock_name: str = DEFAULT_LOCK_NAME) -> str:
    """Get the absolute lock file path for a data directory"""
    datadir = os.fspath(datadir)
    if not datadir:
        raise ValueError('data directory must not be empty')
    return os.path.join(os.path.abspath(os.path.expanduser(datadir)), validate_lock_name(lock_name))
