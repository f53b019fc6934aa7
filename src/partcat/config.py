from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from jsonschema import Draft202012Validator
from referencing import Registry, Resource

from .resolver import DEFAULT_ARTIFACT_SCHEME
from .task import ConcatenationTask

SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"

TASK_SCHEMA_ID = "partcat:task-v1"
CONFIG_SCHEMA_ID = "partcat:config-v1"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class Settings:
    base_directory: Path
    output_directory: Path | None
    artifact_scheme: str = DEFAULT_ARTIFACT_SCHEME
    # None => PARTCAT_REPOSITORY or ~/.m2/repository
    repository: Path | None = None
    tasks: List[ConcatenationTask] | None = None


def _load(name: str) -> Any:
    return json.loads((SCHEMA_DIR / name).read_text(encoding="utf-8"))


def _validator() -> Draft202012Validator:
    task = _load("task-v1.schema.json")
    config = _load("config-v1.schema.json")
    reg = Registry().with_resources([
        (TASK_SCHEMA_ID, Resource.from_contents(task)),
        (CONFIG_SCHEMA_ID, Resource.from_contents(config)),
    ])
    return Draft202012Validator(config, registry=reg)


def validate_or_raise(obj: Any) -> None:
    errs = sorted(_validator().iter_errors(obj), key=lambda e: [str(p) for p in e.path])
    if errs:
        msg = "; ".join([f"{list(e.path)}: {e.message}" for e in errs[:5]])
        raise ConfigError(msg)


def _resolve(base: Path, value: str | None) -> Path | None:
    if not value:
        return None
    return base / Path(value).expanduser()


def settings_from_dict(obj: Dict[str, Any], base_directory: Path) -> Settings:
    validate_or_raise(obj)

    base = _resolve(base_directory, obj.get("baseDirectory")) or base_directory
    files = obj.get("files")
    tasks = [ConcatenationTask.from_dict(f) for f in files] if files is not None else None

    return Settings(
        base_directory=base,
        output_directory=_resolve(base, obj.get("outputDirectory")),
        artifact_scheme=obj.get("artifactScheme", DEFAULT_ARTIFACT_SCHEME),
        repository=_resolve(base, obj.get("repository")),
        tasks=tasks,
    )


def load_config(path: Path) -> Settings:
    """Read a JSON configuration file.

    Relative directories in the file resolve against `baseDirectory`, which
    itself defaults to the directory holding the configuration file.
    """

    p = Path(path)
    try:
        obj = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"no such config file: {p}") from e
    except (OSError, ValueError) as e:
        raise ConfigError(f"unreadable config file {p}: {e}") from e
    if not isinstance(obj, dict):
        raise ConfigError(f"{p}: configuration must be a JSON object")
    return settings_from_dict(obj, p.resolve().parent)
