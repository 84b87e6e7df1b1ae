from __future__ import annotations

import logging
import os
import stat
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING

from dircompare.filters import PathFilter
from dircompare.models import FileRecord, Inventory

if TYPE_CHECKING:
    from rich.console import Console


logger = logging.getLogger(__name__)


class InventoryError(RuntimeError):
    """A subtree under ``root`` could not be enumerated."""

    def __init__(self, root: Path, path: Path | str, cause: OSError) -> None:
        self.root = root
        self.path = str(path)
        reason = cause.strerror or str(cause)
        super().__init__(f"Cannot scan {self.path} under {root}: {reason}")


def validate_root(root: Path | str) -> Path:
    resolved = Path(root).expanduser().resolve()
    if not resolved.is_dir():
        raise FileNotFoundError(f"Folder not found or not a directory: {resolved}")
    return resolved


def _stat_regular_file(root: Path, file_path: Path) -> os.stat_result | None:
    try:
        # Follows symlinks; a dangling link or a file removed mid-scan has nothing to compare.
        st = file_path.stat()
    except FileNotFoundError:
        logger.debug("Skipping vanished or dangling entry %s", file_path)
        return None
    except OSError as exc:
        raise InventoryError(root, file_path, exc) from exc
    if not stat.S_ISREG(st.st_mode):
        return None
    return st


def build_inventory(root: Path, *, path_filter: PathFilter | None = None) -> Inventory:
    """Map every regular file under ``root`` by its POSIX path relative to ``root``.

    Raises InventoryError as soon as any directory cannot be listed, so a
    returned inventory is always complete.
    """
    root = root.resolve()
    path_filter = path_filter or PathFilter()
    records: dict[str, FileRecord] = {}

    def _on_walk_error(exc: OSError) -> None:
        raise InventoryError(root, exc.filename or root, exc) from exc

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_walk_error):
        current = Path(dirpath)
        relative_dir = current.relative_to(root).as_posix()
        prefix = "" if relative_dir == "." else f"{relative_dir}/"
        # Pruned in place so os.walk never lists excluded subtrees.
        dirnames[:] = sorted(
            name for name in dirnames if not path_filter.excludes_directory(prefix + name)
        )
        for name in sorted(filenames):
            file_path = current / name
            relative_path = prefix + name
            if not path_filter.matches(relative_path):
                continue
            st = _stat_regular_file(root, file_path)
            if st is None:
                continue
            records[relative_path] = FileRecord(
                relative_path=relative_path,
                size=st.st_size,
                mtime_ns=st.st_mtime_ns,
                absolute_path=file_path,
            )

    logger.debug("Inventory of %s: %d file(s)", root, len(records))
    return MappingProxyType(records)


def build_inventories(
    root_a: Path,
    root_b: Path,
    *,
    path_filter: PathFilter | None = None,
    console: "Console | None" = None,
) -> tuple[Inventory, Inventory]:
    """Build both inventories concurrently; the first failure propagates."""

    def _build_both() -> tuple[Inventory, Inventory]:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="dircompare-scan") as executor:
            future_a = executor.submit(build_inventory, root_a, path_filter=path_filter)
            future_b = executor.submit(build_inventory, root_b, path_filter=path_filter)
            return future_a.result(), future_b.result()

    if console is not None:
        with console.status("Discovering files to compare..."):
            return _build_both()
    return _build_both()
