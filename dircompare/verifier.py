from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from dircompare.models import Verdict


logger = logging.getLogger(__name__)

HASH_ALGORITHMS = ("md5", "sha256")
DEFAULT_HASH_ALGORITHM = "md5"


def _digest_file(
    path: Path,
    algorithm: str = DEFAULT_HASH_ALGORITHM,
    chunk_size: int = 1024 * 1024,
) -> str:
    digest = hashlib.new(algorithm)
    with path.open("rb") as fh:
        while True:
            chunk = fh.read(chunk_size)
            if not chunk:
                break
            digest.update(chunk)
    return digest.hexdigest()


def verify(path_a: Path, path_b: Path, *, algorithm: str = DEFAULT_HASH_ALGORITHM) -> Verdict:
    """Digest both files in full and compare.

    A read failure on either side is reported as ERROR, never UNEQUAL.
    """
    if algorithm not in HASH_ALGORITHMS:
        raise ValueError(f"Unsupported hash algorithm: {algorithm!r}")
    try:
        digest_a = _digest_file(Path(path_a), algorithm)
        digest_b = _digest_file(Path(path_b), algorithm)
    except OSError as exc:
        logger.warning("Cannot checksum %s / %s: %s", path_a, path_b, exc)
        return Verdict.ERROR
    return Verdict.EQUAL if digest_a == digest_b else Verdict.UNEQUAL
