import os
import stat
import sys
import tempfile
import unittest
from pathlib import Path

from walkrig.errors import RenderError
from walkrig.render import blender_command, run_blender_render


def _fake_blender(path: Path, exit_code: int) -> Path:
    path.write_text(f'#!/bin/sh\necho "rendering $@"\necho "warn" 1>&2\nexit {exit_code}\n', encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


class TestBlenderCommand(unittest.TestCase):
    def test_headless_render_anim(self) -> None:
        cmd = blender_command(Path("/opt/blender"), Path("out/generated_script.py"))
        self.assertEqual(cmd[0], "/opt/blender")
        self.assertEqual(cmd[1:3], ["--background", "--python"])
        self.assertEqual(Path(cmd[3]), Path("out/generated_script.py"))
        self.assertEqual(cmd[-1], "--render-anim")


class TestRunBlender(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.tmp = Path(self._td.name)
        self.script = self.tmp / "generated_script.py"
        self.script.write_text("import bpy\n", encoding="utf-8")

    def tearDown(self) -> None:
        self._td.cleanup()

    def test_missing_executable(self) -> None:
        with self.assertRaises(RenderError):
            run_blender_render(self.tmp / "no-blender", self.script)

    @unittest.skipIf(sys.platform.startswith("win") or not os.path.exists("/bin/sh"), "needs a POSIX shell")
    def test_success(self) -> None:
        res = run_blender_render(_fake_blender(self.tmp / "blender", 0), self.script)
        self.assertTrue(res.ok)
        self.assertEqual(res.returncode, 0)
        self.assertIn("--render-anim", res.stdout)
        self.assertIn("warn", res.stderr)

    @unittest.skipIf(sys.platform.startswith("win") or not os.path.exists("/bin/sh"), "needs a POSIX shell")
    def test_failure_is_reported_not_raised(self) -> None:
        res = run_blender_render(_fake_blender(self.tmp / "blender", 3), self.script)
        self.assertFalse(res.ok)
        self.assertEqual(res.returncode, 3)


if __name__ == "__main__":
    unittest.main()
