from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from dirlock import lock as lock_module
from dirlock.errors import DataDirInUseError, LockAcquisitionError
from dirlock.guard import DataDirGuard, probe
from dirlock.lock import ExclusiveFileLock


class DataDirGuardTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.datadir = Path(self._tmp.name) / "chaindata"

    def _guard(self, **kwargs) -> DataDirGuard:
        guard = DataDirGuard(self.datadir, **kwargs)
        self.addCleanup(guard.close)
        return guard

    def test_open_creates_directory_and_lock_file(self) -> None:
        guard = self._guard()
        guard.open()
        self.assertTrue(guard.is_open)
        self.assertTrue((self.datadir / "LOCK").exists())

    def test_second_guard_reports_directory_in_use(self) -> None:
        self._guard().open()
        with self.assertRaises(DataDirInUseError) as ctx:
            self._guard().open()
        self.assertIn(str(self.datadir), str(ctx.exception))
        self.assertEqual(ctx.exception.path, str(self.datadir / "LOCK"))

    def test_open_twice_is_noop(self) -> None:
        guard = self._guard()
        guard.open()
        guard.open()
        self.assertTrue(guard.is_open)

    def test_close_frees_directory_and_is_idempotent(self) -> None:
        guard = self._guard()
        guard.open()
        guard.close()
        guard.close()
        self.assertFalse(guard.is_open)
        self._guard().open()

    def test_no_create_with_missing_directory_fails(self) -> None:
        with self.assertRaises(LockAcquisitionError):
            self._guard(create=False).open()
        self.assertFalse(self.datadir.exists())

    def test_custom_lock_name(self) -> None:
        self._guard(lock_name="node.lock").open()
        self.assertTrue((self.datadir / "node.lock").exists())
        self._guard().open()

    def test_lock_name_with_separator_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            DataDirGuard(self.datadir, lock_name="sub/LOCK")

    def test_context_manager_releases_on_error(self) -> None:
        with self.assertRaises(RuntimeError):
            with self._guard():
                raise RuntimeError("startup failed")
        self.assertFalse(probe(self.datadir))

    def test_close_logs_release_failure(self) -> None:
        guard = self._guard()
        guard.open()
        with patch.object(lock_module, "_unlock", side_effect=OSError(9, "Bad file descriptor")):
            with self.assertLogs("dirlock.guard", level="WARNING") as logs:
                guard.close()
        self.assertIn("failed to release", logs.output[0])
        self.assertFalse(guard.is_open)


class ProbeTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.datadir = Path(self._tmp.name)

    def test_absent_lock_file_is_not_created(self) -> None:
        self.assertFalse(probe(self.datadir))
        self.assertFalse((self.datadir / "LOCK").exists())

    def test_free_and_locked(self) -> None:
        holder = ExclusiveFileLock(self.datadir / "LOCK")
        self.addCleanup(holder.release)
        self.assertTrue(holder.try_acquire())
        self.assertTrue(probe(self.datadir))

        holder.release()
        self.assertFalse(probe(self.datadir))


if __name__ == "__main__":
    unittest.main()
