"""Typed configuration loading.

Configuration lives in an optional ``cdist.toml`` at the package root:

    [binary]
    name = "changie"

    [paths]
    dist = "npm/dist"
    dest = "."
    manifest = "npm/dist/manifest.json"
    artifacts = "dist/artifacts.json"

    [release]
    workers = 4

    [release.os]
    windows = "win32"

    [release.arch]
    "386" = "ia32"

Every key is optional; missing values fall back to the defaults below.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str, get_str_map, get_table

__all__ = [
    "BinaryConfig",
    "Config",
    "ConfigError",
    "PathsConfig",
    "ReleaseConfig",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_NAME",
    "DEFAULT_ARCH_MAP",
    "DEFAULT_OS_MAP",
    "default_config_path",
    "load_config",
    "load_config_or_default",
]

CONFIG_ENV_VAR = "CDIST_CONFIG"
DEFAULT_CONFIG_NAME = "cdist.toml"

DEFAULT_BINARY_NAME = "changie"
DEFAULT_DIST_DIR = "npm/dist"
DEFAULT_DEST_DIR = "."
DEFAULT_ARTIFACTS_PATH = "dist/artifacts.json"
DEFAULT_WORKERS = 4

# Release builder OS name -> Node-style platform name
DEFAULT_OS_MAP: Mapping[str, str] = {
    "darwin": "darwin",
    "linux": "linux",
    "windows": "win32",
}

# Release builder architecture -> Node-style arch name
DEFAULT_ARCH_MAP: Mapping[str, str] = {
    "386": "ia32",
    "amd64": "x64",
    "arm64": "arm64",
}


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class BinaryConfig:
    name: str = DEFAULT_BINARY_NAME


@dataclass(frozen=True, slots=True)
class PathsConfig:
    """Paths, relative to the config file's directory unless absolute."""

    dist: str = DEFAULT_DIST_DIR
    dest: str = DEFAULT_DEST_DIR
    manifest: str | None = None
    artifacts: str = DEFAULT_ARTIFACTS_PATH

    @property
    def manifest_path(self) -> str:
        """Manifest path, defaulting to ``manifest.json`` inside the dist dir."""
        return self.manifest or f"{self.dist}/manifest.json"


def _default_os_map() -> dict[str, str]:
    return dict(DEFAULT_OS_MAP)


def _default_arch_map() -> dict[str, str]:
    return dict(DEFAULT_ARCH_MAP)


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Settings for preparing a release from builder artifacts."""

    workers: int = DEFAULT_WORKERS
    os_map: dict[str, str] = field(default_factory=_default_os_map)
    arch_map: dict[str, str] = field(default_factory=_default_arch_map)


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    binary: BinaryConfig = field(default_factory=BinaryConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    root: Path = field(default_factory=Path.cwd)

    def resolve(self, value: str) -> Path:
        """Resolve a configured path against the config root."""
        p = Path(value).expanduser()
        return p if p.is_absolute() else self.root / p

    @property
    def dist_dir(self) -> Path:
        return self.resolve(self.paths.dist)

    @property
    def dest_dir(self) -> Path:
        return self.resolve(self.paths.dest)

    @property
    def manifest_path(self) -> Path:
        return self.resolve(self.paths.manifest_path)

    @property
    def artifacts_path(self) -> Path:
        return self.resolve(self.paths.artifacts)

    @classmethod
    def from_dict(cls, data: Mapping[str, object], *, root: Path | None = None) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        binary: StrDict = get_table(data, "binary") or {}
        paths: StrDict = get_table(data, "paths") or {}
        release: StrDict = get_table(data, "release") or {}

        workers = get_int(release, "workers")
        if workers is not None and workers < 1:
            raise ValueError(f"release.workers must be >= 1 (got {workers})")

        return cls(
            binary=BinaryConfig(name=get_str(binary, "name") or DEFAULT_BINARY_NAME),
            paths=PathsConfig(
                dist=get_str(paths, "dist") or DEFAULT_DIST_DIR,
                dest=get_str(paths, "dest") or DEFAULT_DEST_DIR,
                manifest=get_str(paths, "manifest"),
                artifacts=get_str(paths, "artifacts") or DEFAULT_ARTIFACTS_PATH,
            ),
            release=ReleaseConfig(
                workers=workers or DEFAULT_WORKERS,
                os_map={**DEFAULT_OS_MAP, **get_str_map(release, "os")},
                arch_map={**DEFAULT_ARCH_MAP, **get_str_map(release, "arch")},
            ),
            root=root if root is not None else Path.cwd(),
        )


def default_config_path() -> Path:
    """Config path from ``$CDIST_CONFIG``, else ``./cdist.toml``."""
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser()
    return Path.cwd() / DEFAULT_CONFIG_NAME


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load configuration from a TOML file.

    Relative paths inside the file resolve against the file's directory.
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value, root=path.resolve().parent))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config if the file exists, else defaults rooted at the cwd.

    A file that exists but is invalid is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
