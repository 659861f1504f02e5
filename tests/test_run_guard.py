from __future__ import annotations

import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from app.services.run_guard import RunGuard, RunInProgressError


class TestRunGuard(unittest.TestCase):
    def setUp(self) -> None:
        self.guard = RunGuard()
        self._tmp = TemporaryDirectory()
        self.db_path = Path(self._tmp.name) / "target.sqlite"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_second_hold_on_same_path_is_rejected(self) -> None:
        with self.guard.hold(self.db_path):
            self.assertTrue(self.guard.is_held(self.db_path))
            with self.assertRaises(RunInProgressError) as ctx:
                with self.guard.hold(str(self.db_path)):
                    pass

        self.assertEqual(ctx.exception.code, "run_in_progress")
        self.assertFalse(self.guard.is_held(self.db_path))

    def test_equivalent_paths_share_one_lock(self) -> None:
        alias = self.db_path.parent / "." / self.db_path.name

        with self.guard.hold(self.db_path):
            with self.assertRaises(RunInProgressError):
                with self.guard.hold(alias):
                    pass

    def test_different_databases_do_not_block_each_other(self) -> None:
        with self.guard.hold(self.db_path):
            with self.guard.hold(self.db_path.with_name("other.sqlite")):
                self.assertTrue(self.guard.is_held(self.db_path.with_name("other.sqlite")))

    def test_lock_is_released_on_error(self) -> None:
        with self.assertRaises(ValueError):
            with self.guard.hold(self.db_path):
                raise ValueError("run failed")

        self.assertFalse(self.guard.is_held(self.db_path))


if __name__ == "__main__":
    unittest.main()
