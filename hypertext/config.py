from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError

try:
    import tomllib as toml
except ImportError:
    try:
        import tomli as toml
    except ImportError:  # pragma: no cover - optional dependency
        toml = None

try:
    import yaml
except ImportError:  # pragma: no cover - optional dependency
    yaml = None

DEFAULT_CONFIG = "hypertext.toml"
MAX_BUILD_WORKERS = 32
TRUE_WORDS = frozenset({"1", "true", "yes", "y", "on"})


@dataclass(frozen=True)
class SiteConfig:
    """Where a project keeps its sources and where the build writes to.

    Directory names are relative to ``root`` unless given as absolute paths.
    """

    root: Path = field(default_factory=Path.cwd)
    content: str = "content"
    static: str = "static"
    styles: str = "styles"
    templates: str = "templates"
    output: str = "public"
    build_workers: int = 0
    host: str = "localhost"
    port: int = 8000
    watch: bool = False

    @property
    def content_dir(self) -> Path:
        return self.root / self.content

    @property
    def static_dir(self) -> Path:
        return self.root / self.static

    @property
    def styles_dir(self) -> Path:
        return self.root / self.styles

    @property
    def templates_dir(self) -> Path:
        return self.root / self.templates

    @property
    def output_dir(self) -> Path:
        return self.root / self.output

    def workers(self, jobs: int) -> int:
        workers = self.build_workers
        if workers <= 0:
            workers = os.cpu_count() or 1
        workers = max(1, min(workers, MAX_BUILD_WORKERS))
        return max(1, min(workers, jobs))


def _load_toml(text: str, path: Path) -> object:
    if toml is None:
        raise ConfigError(path, "TOML config requires tomllib (Python 3.11+) or tomli")
    try:
        return toml.loads(text)
    except toml.TOMLDecodeError as exc:
        raise ConfigError(path, f"invalid TOML ({exc})") from exc


def _load_yaml(text: str, path: Path) -> object:
    if yaml is None:
        raise ConfigError(path, "YAML config requires PyYAML")
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(path, f"invalid YAML ({exc})") from exc


def _load_json(text: str, path: Path) -> object:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(path, f"invalid JSON ({exc})") from exc


LOADERS = {".toml": _load_toml, ".yml": _load_yaml, ".yaml": _load_yaml}


def load_config(path: Path) -> dict:
    """Read SiteConfig defaults from a TOML, YAML or JSON file, picked by suffix.

    A missing or empty file gives no defaults. Anything else that is not a
    mapping raises ConfigError.
    """
    if not path.exists():
        return {}
    loader = LOADERS.get(path.suffix.lower(), _load_json)
    data = loader(path.read_text(encoding="utf-8"), path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(path, "top level must be a mapping")
    return data


def parse_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUE_WORDS
    if isinstance(value, (bool, int, float)):
        return bool(value)
    return False


def parse_int(value: object, default: int) -> int:
    if isinstance(value, (bool, int)):
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError:
        return default
