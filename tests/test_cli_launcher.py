import io
import sys
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from tempfile import TemporaryDirectory

REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import cli_launcher


class CliLauncherTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = TemporaryDirectory()
        self.tmp_path = Path(self.tmpdir.name)
        self.log_path = self.tmp_path / "run.log"

    def tearDown(self) -> None:
        self.tmpdir.cleanup()

    def run_cli(self, *args):
        stdout = io.StringIO()
        stderr = io.StringIO()
        argv = [*args, "--no-progress", "--log-file", str(self.log_path)]
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = cli_launcher.main(argv)
        return code, stdout.getvalue()

    def make_source(self) -> Path:
        root = self.tmp_path / "game"
        (root / "sub").mkdir(parents=True)
        (root / "a.txt").write_bytes(b"hello")
        (root / "sub" / "b.png").write_bytes(bytes(range(100)))
        return root

    def test_usage_without_arguments(self):
        code, out = self.run_cli()
        self.assertEqual(code, -1)
        self.assertIn("Usage for unpacking", out)

    def test_missing_path(self):
        code, out = self.run_cli(str(self.tmp_path / "nothing"))
        self.assertEqual(code, -1)
        self.assertIn("Usage for packing", out)

    def test_pack_then_extract(self):
        root = self.make_source()
        code, _ = self.run_cli(str(root) + "/")
        self.assertEqual(code, 0)
        archive = self.tmp_path / "game_new.bin"
        self.assertTrue(archive.is_file())

        code, _ = self.run_cli(str(archive))
        self.assertEqual(code, 0)
        out_dir = self.tmp_path / "game_new.bin.ex"
        self.assertEqual((out_dir / "a.txt").read_bytes(), b"hello")
        self.assertEqual((out_dir / "sub" / "b.png").read_bytes(), bytes(range(100)))
        self.assertTrue(self.log_path.exists())

    def test_list_and_meta(self):
        root = self.make_source()
        self.run_cli(str(root))
        archive = self.tmp_path / "game_new.bin"

        code, out = self.run_cli(str(archive), "--list")
        self.assertEqual(code, 0)
        self.assertIn("sub/b.png", out)
        self.assertFalse((self.tmp_path / "game_new.bin.ex").exists())

        code, _ = self.run_cli(str(archive), "--meta", "--dump-infodata")
        self.assertEqual(code, 0)
        self.assertTrue((self.tmp_path / "game_new.bin.ex_meta.json").is_file())
        self.assertTrue((self.tmp_path / "game_new.bin.ex_InfoData").is_file())

    def test_output_cannot_be_created(self):
        root = self.make_source()
        code, _ = self.run_cli(str(root), "-o", str(self.tmp_path / "missing" / "out.bin"))
        self.assertEqual(code, -1)

    def test_corrupt_archive(self):
        bad = self.tmp_path / "bad.bin"
        bad.write_bytes(b"\xff\xff\x00\x00\x00\x00\x00\x00garbage!")
        code, _ = self.run_cli(str(bad))
        self.assertEqual(code, -2)

    def test_keep_going_reports_failures(self):
        root = self.make_source()
        self.run_cli(str(root))
        archive = self.tmp_path / "game_new.bin"
        archive.write_bytes(archive.read_bytes()[:-8])

        code, out = self.run_cli(str(archive), "--keep-going")
        self.assertEqual(code, -1)
        self.assertIn("b.png", out)
        self.assertEqual((self.tmp_path / "game_new.bin.ex" / "a.txt").read_bytes(), b"hello")


if __name__ == "__main__":
    unittest.main()
