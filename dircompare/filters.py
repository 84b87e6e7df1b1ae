from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath


def _normalize_pattern(pattern: str) -> str:
    normalized = pattern.strip().replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


def _is_directory_pattern(pattern: str) -> bool:
    return pattern.endswith("/")


def _match_directory(relative_dir: str, pattern: str) -> bool:
    # "build/" matches a directory named build at the root or at any depth.
    return f"/{relative_dir}/".find(f"/{pattern}") != -1


def _match_pattern(path: str, pattern: str) -> bool:
    if _is_directory_pattern(pattern):
        parent = PurePosixPath(path).parent.as_posix()
        return parent != "." and _match_directory(parent, pattern)
    path_obj = PurePosixPath(path)
    return path_obj.match(pattern) or path_obj.match(f"**/{pattern}")


@dataclass(slots=True, frozen=True)
class PathFilter:
    """Include/exclude globs over POSIX paths relative to a scanned root.

    A pattern ending in ``/`` names a directory; every file beneath it
    matches, and the scanner does not descend into an excluded one.
    """

    include_patterns: tuple[str, ...] = ()
    exclude_patterns: tuple[str, ...] = ()

    def matches(self, path: str) -> bool:
        included = not self.include_patterns or any(
            _match_pattern(path, pattern) for pattern in self.include_patterns
        )
        return included and not any(
            _match_pattern(path, pattern) for pattern in self.exclude_patterns
        )

    def excludes_directory(self, relative_dir: str) -> bool:
        return any(
            _match_directory(relative_dir, pattern)
            for pattern in self.exclude_patterns
            if _is_directory_pattern(pattern)
        )


def build_path_filter(
    include_patterns: list[str] | tuple[str, ...] | None = None,
    exclude_patterns: list[str] | tuple[str, ...] | None = None,
) -> PathFilter:
    include = tuple(filter(None, map(_normalize_pattern, include_patterns or ())))
    exclude = tuple(filter(None, map(_normalize_pattern, exclude_patterns or ())))
    return PathFilter(include_patterns=include, exclude_patterns=exclude)
