"""Tests for the jpegdump command line."""
import os
import tempfile

import pytest

from jpeg_dump.main import EX_IOERR, EX_OK, main


@pytest.fixture
def jpeg_file():
    paths = []

    def _write(data: bytes) -> str:
        with tempfile.NamedTemporaryFile(delete=False, suffix=".jls") as f:
            f.write(data)
            paths.append(f.name)
        return f.name

    yield _write

    for path in paths:
        os.unlink(path)


class TestMain:
    """Tests for main()."""

    def test_dump_file(self, jpeg_file, capsys):
        path = jpeg_file(b"\xFF\xD8\xFF\xD9")

        assert main([path]) == EX_OK

        out = capsys.readouterr().out.splitlines()
        assert out[0] == f"Dumping JPEG file: {path}"
        assert set(out[1]) == {"="}
        assert out[2].startswith("       0 Marker 0xFFD8")
        assert out[3].startswith("       2 Marker 0xFFD9")
        assert len(out) == 4

    def test_missing_file(self, capsys):
        assert main(["does-not-exist.jls"]) == EX_IOERR

    def test_truncated_file(self, jpeg_file, capsys):
        """Truncated segments read as zero unless --strict is given."""
        path = jpeg_file(bytes.fromhex("FFD8 FFDA 0008 02 01"))

        assert main([path]) == EX_OK
        assert main([path, "--strict"]) == EX_IOERR

    def test_verbose(self, jpeg_file, capsys):
        path = jpeg_file(b"\xFF\xD8\xFF\xD9")
        assert main([path, "-v"]) == EX_OK

    def test_missing_argument(self):
        with pytest.raises(SystemExit) as e:
            main([])
        assert e.value.code == 2
