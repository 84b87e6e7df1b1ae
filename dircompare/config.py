from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from dircompare.compare_service import DEFAULT_HASH_WORKERS, CompareOptions
from dircompare.filters import PathFilter, build_path_filter
from dircompare.verifier import DEFAULT_HASH_ALGORITHM


CONFIG_FILENAME = ".dircompare.json"


@dataclass(slots=True)
class DirCompareConfig:
    check_content: bool = False
    include_missing_from_a: bool = False
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM
    time_tolerance: float = 0.0
    workers: int = DEFAULT_HASH_WORKERS
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)

    @property
    def path_filter(self) -> PathFilter:
        return build_path_filter(self.include, self.exclude)

    def to_options(self) -> CompareOptions:
        return CompareOptions(
            check_content=self.check_content,
            include_missing_from_a=self.include_missing_from_a,
            hash_algorithm=self.hash_algorithm,
            time_tolerance=self.time_tolerance,
            workers=self.workers,
        )

    def with_overrides(self, **overrides: Any) -> "DirCompareConfig":
        """Return a copy with every non-None override applied."""
        return replace(self, **{key: value for key, value in overrides.items() if value is not None})


def config_path(base_dir: Path | None = None) -> Path:
    return (base_dir or Path.cwd()).resolve() / CONFIG_FILENAME


def _check_type(key: str, value: Any, expected: tuple[type, ...]) -> None:
    # bool is an int subclass; reject it where a number is expected.
    wrong_bool = isinstance(value, bool) and bool not in expected
    if wrong_bool or not isinstance(value, expected):
        raise ValueError(f"Invalid value for {key!r} in config: {value!r}")


def _config_from_dict(data: dict[str, Any]) -> DirCompareConfig:
    if not isinstance(data, dict):
        raise ValueError("Config file must contain a JSON object")

    expected_types: dict[str, tuple[type, ...]] = {
        "check_content": (bool,),
        "include_missing_from_a": (bool,),
        "hash_algorithm": (str,),
        "time_tolerance": (int, float),
        "workers": (int,),
        "include": (list,),
        "exclude": (list,),
    }
    values: dict[str, Any] = {}
    for item in fields(DirCompareConfig):
        if item.name not in data:
            continue
        value = data[item.name]
        _check_type(item.name, value, expected_types[item.name])
        if item.name in {"include", "exclude"}:
            if not all(isinstance(pattern, str) for pattern in value):
                raise ValueError(f"Invalid value for {item.name!r} in config: {value!r}")
            value = list(value)
        values[item.name] = value

    config = DirCompareConfig(**values)
    # Surface invalid option values at load time.
    config.to_options()
    return config


def load_config(path: Path | None = None, base_dir: Path | None = None) -> DirCompareConfig:
    """Load an explicit config file, or the one in ``base_dir`` when present.

    Without an explicit path a missing file yields the defaults.
    """
    if path is not None:
        path = Path(path).expanduser()
        if not path.is_file():
            raise FileNotFoundError(f"Config file not found: {path}")
    else:
        path = config_path(base_dir)
        if not path.exists():
            return DirCompareConfig()

    with path.open("r", encoding="utf-8") as fh:
        try:
            data = json.load(fh)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Config file {path} is not valid JSON: {exc}") from exc

    return _config_from_dict(data)


def save_config(config: DirCompareConfig, base_dir: Path | None = None) -> Path:
    path = config_path(base_dir)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(asdict(config), fh, indent=2)
        fh.write("\n")
    return path
