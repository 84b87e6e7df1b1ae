from __future__ import annotations

from pathlib import Path

import pytest

from dircompare.models import Verdict
from dircompare.verifier import verify


def _write(path: Path, content: bytes) -> Path:
    path.write_bytes(content)
    return path


@pytest.mark.parametrize("algorithm", ["md5", "sha256"])
def test_identical_files_are_equal(tmp_path: Path, algorithm: str) -> None:
    a = _write(tmp_path / "a.bin", b"\x00" * 3_000_000)
    b = _write(tmp_path / "b.bin", b"\x00" * 3_000_000)

    assert verify(a, b, algorithm=algorithm) is Verdict.EQUAL


def test_same_size_different_bytes_are_unequal(tmp_path: Path) -> None:
    a = _write(tmp_path / "a.txt", b"abc")
    b = _write(tmp_path / "b.txt", b"xyz")

    assert verify(a, b) is Verdict.UNEQUAL


def test_difference_in_last_chunk_is_detected(tmp_path: Path) -> None:
    payload = b"z" * (2 * 1024 * 1024)
    a = _write(tmp_path / "a.bin", payload + b"1")
    b = _write(tmp_path / "b.bin", payload + b"2")

    assert verify(a, b) is Verdict.UNEQUAL


@pytest.mark.parametrize("missing_side", ["a", "b"])
def test_read_failure_is_an_error_not_a_mismatch(tmp_path: Path, missing_side: str) -> None:
    present = _write(tmp_path / "present.txt", b"abc")
    missing = tmp_path / "missing.txt"
    pair = (missing, present) if missing_side == "a" else (present, missing)

    assert verify(*pair) is Verdict.ERROR


def test_directory_instead_of_file_is_an_error(tmp_path: Path) -> None:
    present = _write(tmp_path / "present.txt", b"abc")
    directory = tmp_path / "dir"
    directory.mkdir()

    assert verify(present, directory) is Verdict.ERROR


def test_unknown_algorithm_is_rejected(tmp_path: Path) -> None:
    a = _write(tmp_path / "a.txt", b"abc")

    with pytest.raises(ValueError):
        verify(a, a, algorithm="crc32")
