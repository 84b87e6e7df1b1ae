from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable

from dircompare.models import Difference, FileRecord, Inventory, Reason, Status, Verdict
from dircompare.verifier import DEFAULT_HASH_ALGORITHM, HASH_ALGORITHMS, verify


logger = logging.getLogger(__name__)

DEFAULT_HASH_WORKERS = 4

ProgressCallback = Callable[[int, int], None]


@dataclass(slots=True, frozen=True)
class CompareOptions:
    check_content: bool = False
    include_missing_from_a: bool = False
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM
    # Seconds; 0 keeps exact mtime equality.
    time_tolerance: float = 0.0
    workers: int = DEFAULT_HASH_WORKERS

    def __post_init__(self) -> None:
        if self.hash_algorithm not in HASH_ALGORITHMS:
            raise ValueError(
                f"hash_algorithm must be one of {', '.join(HASH_ALGORITHMS)}, got {self.hash_algorithm!r}"
            )
        if not math.isfinite(self.time_tolerance) or self.time_tolerance < 0:
            raise ValueError("time_tolerance must be a finite, non-negative number of seconds")
        if self.workers < 1:
            raise ValueError("workers must be at least 1")

    @property
    def time_tolerance_ns(self) -> int:
        return round(self.time_tolerance * 1_000_000_000)


def _missing_in_b(record: FileRecord) -> Difference:
    return Difference(
        path=record.relative_path,
        size_a=record.size,
        size_b=None,
        mtime_a_ns=record.mtime_ns,
        mtime_b_ns=None,
        reason=Reason.MISSING,
        status=Status.MISSING_IN_B,
    )


def _missing_in_a(record: FileRecord) -> Difference:
    return Difference(
        path=record.relative_path,
        size_a=None,
        size_b=record.size,
        mtime_a_ns=None,
        mtime_b_ns=record.mtime_ns,
        reason=Reason.MISSING,
        status=Status.MISSING_IN_A,
    )


def _different(record_a: FileRecord, record_b: FileRecord, reason: Reason) -> Difference:
    return Difference(
        path=record_a.relative_path,
        size_a=record_a.size,
        size_b=record_b.size,
        mtime_a_ns=record_a.mtime_ns,
        mtime_b_ns=record_b.mtime_ns,
        reason=reason,
        status=Status.DIFFERENT,
    )


def _metadata_difference(
    record_a: FileRecord, record_b: FileRecord, tolerance_ns: int
) -> Difference | None:
    if record_a.size != record_b.size:
        return _different(record_a, record_b, Reason.SIZE)
    if abs(record_a.mtime_ns - record_b.mtime_ns) > tolerance_ns:
        return _different(record_a, record_b, Reason.DATE)
    return None


def _content_difference(
    record_a: FileRecord, record_b: FileRecord, algorithm: str
) -> Difference | None:
    verdict = verify(record_a.absolute_path, record_b.absolute_path, algorithm=algorithm)
    if verdict is Verdict.EQUAL:
        return None
    if verdict is Verdict.ERROR:
        return _different(record_a, record_b, Reason.HASH_ERROR)
    return _different(record_a, record_b, Reason.CONTENT)


def sort_differences(differences: list[Difference]) -> list[Difference]:
    return sorted(differences, key=lambda difference: difference.sort_key)


def compare(
    inventory_a: Inventory,
    inventory_b: Inventory,
    options: CompareOptions | None = None,
    *,
    on_progress: ProgressCallback | None = None,
) -> list[Difference]:
    """Reconcile two inventories into a sorted list of differences.

    Each path of A is checked for presence in B, then size, then mtime, then
    (when ``check_content`` is set) content; the first disagreement decides
    the reason and later checks are skipped. With ``include_missing_from_a``
    the paths only present in B are added as MissingInA. ``on_progress``
    receives ``(processed, total)`` once per path of A.
    """
    options = options or CompareOptions()
    tolerance_ns = options.time_tolerance_ns
    total = len(inventory_a)
    processed = 0
    differences: list[Difference] = []
    pending_content: list[tuple[FileRecord, FileRecord]] = []

    def _tick() -> None:
        nonlocal processed
        processed += 1
        if on_progress is not None:
            on_progress(processed, total)

    parallel_content = options.check_content and options.workers > 1

    for path in sorted(inventory_a):
        record_a = inventory_a[path]
        record_b = inventory_b.get(path)
        if record_b is None:
            differences.append(_missing_in_b(record_a))
            _tick()
            continue

        difference = _metadata_difference(record_a, record_b, tolerance_ns)
        if difference is None and options.check_content:
            if parallel_content:
                pending_content.append((record_a, record_b))
                continue
            difference = _content_difference(record_a, record_b, options.hash_algorithm)
        if difference is not None:
            differences.append(difference)
        _tick()

    if pending_content:
        differences.extend(
            _verify_in_pool(pending_content, options.hash_algorithm, options.workers, _tick)
        )

    if options.include_missing_from_a:
        for path in sorted(inventory_b):
            if path not in inventory_a:
                differences.append(_missing_in_a(inventory_b[path]))

    logger.debug(
        "Compared %d file(s) in A against %d in B: %d difference(s)",
        total,
        len(inventory_b),
        len(differences),
    )
    return sort_differences(differences)


def _verify_in_pool(
    pairs: list[tuple[FileRecord, FileRecord]],
    algorithm: str,
    workers: int,
    on_done: Callable[[], None],
) -> list[Difference]:
    found: list[Difference] = []
    with ThreadPoolExecutor(
        max_workers=min(workers, len(pairs)), thread_name_prefix="dircompare-hash"
    ) as executor:
        futures = [
            executor.submit(_content_difference, record_a, record_b, algorithm)
            for record_a, record_b in pairs
        ]
        try:
            for future in as_completed(futures):
                difference = future.result()
                if difference is not None:
                    found.append(difference)
                on_done()
        except BaseException:
            # Only the checks already running finish; queued ones are dropped.
            executor.shutdown(wait=False, cancel_futures=True)
            raise
    return found
