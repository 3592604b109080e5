"""Workstation configuration loading and platform detection."""
import platform
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import tomli

from workstation.errors import ConfigError
from workstation.logging import get_logger
from workstation.types import ArchConfig, ArchivePackage, BinaryPackage, Config, PackageSpec

logger = get_logger(__name__)

DEFAULT_CONFIG_FILE = "workstation.toml"

ARCHIVE_FIELDS = frozenset({"name", "bin", "archive"})
BINARY_FIELDS = frozenset({"name", "url"})

OS_MAPPINGS = {
    "Linux": "linux",
    "Darwin": "darwin",
}

ARCH_MAPPINGS = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "aarch64": "aarch64",
    "arm64": "aarch64",
}


def current_platform_key(system: Optional[str] = None, machine: Optional[str] = None) -> str:
    """Get the config key for the running platform, e.g. ``linux_x86_64``."""
    system = system or platform.system()
    machine = (machine or platform.machine()).lower()

    if system not in OS_MAPPINGS:
        raise ConfigError(f"Unsupported operating system: {system}")
    if machine not in ARCH_MAPPINGS:
        raise ConfigError(f"Unsupported architecture: {machine}")

    return f"{OS_MAPPINGS[system]}_{ARCH_MAPPINGS[machine]}"


def _require_string(raw: Mapping[str, Any], key: str, where: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{where}: '{key}' must be a non-empty string")
    return value


def _require_name(raw: Mapping[str, Any], where: str) -> str:
    name = _require_string(raw, "name", where)
    # The name becomes a file directly inside the install location
    if "/" in name or "\\" in name or "\0" in name or name in (".", ".."):
        raise ConfigError(f"{where}: invalid package name '{name}', must be a plain file name")
    return name


def decode_package(raw: Any, index: int = 0) -> PackageSpec:
    """Decode one package table by which fields it carries."""
    where = f"packages[{index}]"
    if not isinstance(raw, Mapping):
        raise ConfigError(f"{where}: expected a table, got {type(raw).__name__}")

    keys = set(raw)
    is_archive = ARCHIVE_FIELDS <= keys
    is_binary = BINARY_FIELDS <= keys

    if is_archive and is_binary:
        raise ConfigError(f"{where}: ambiguous package, has both 'archive' and 'url'")

    if is_archive:
        extra = keys - ARCHIVE_FIELDS
        if extra:
            raise ConfigError(f"{where}: unexpected fields {sorted(extra)}")
        return ArchivePackage(
            name=_require_name(raw, where),
            bin=_require_string(raw, "bin", where),
            archive=_require_string(raw, "archive", where),
        )

    if is_binary:
        extra = keys - BINARY_FIELDS
        if extra:
            raise ConfigError(f"{where}: unexpected fields {sorted(extra)}")
        return BinaryPackage(
            name=_require_name(raw, where),
            url=_require_string(raw, "url", where),
        )

    raise ConfigError(
        f"{where}: expected either {{name, bin, archive}} or {{name, url}}, got {sorted(keys)}"
    )


def decode_arch_config(raw: Any, key: str) -> ArchConfig:
    """Decode one platform table."""
    if not isinstance(raw, Mapping):
        raise ConfigError(f"{key}: expected a table, got {type(raw).__name__}")

    location = _require_string(raw, "location", key)
    raw_packages = raw.get("packages", [])
    if not isinstance(raw_packages, list):
        raise ConfigError(f"{key}: 'packages' must be an array of tables")

    packages: List[PackageSpec] = [
        decode_package(item, index) for index, item in enumerate(raw_packages)
    ]

    seen: Dict[str, int] = {}
    for index, package in enumerate(packages):
        if package.name in seen:
            raise ConfigError(
                f"{key}: duplicate package name '{package.name}' "
                f"(packages[{seen[package.name]}] and packages[{index}])"
            )
        seen[package.name] = index

    return ArchConfig(location=location, packages=tuple(packages))


def parse_config(raw: Mapping[str, Any]) -> Config:
    """Build a Config from an already parsed TOML document.

    Only tables can describe a platform; other top-level keys are ignored.
    Nothing is decoded until a platform is selected.
    """
    return Config(tables={key: value for key, value in raw.items() if isinstance(value, Mapping)})


def platform_config(config: Config, key: str) -> ArchConfig:
    """Decode the entry for platform ``key``; other entries are never looked at."""
    try:
        raw = config.tables[key]
    except KeyError:
        available = ", ".join(sorted(config.tables)) or "none"
        raise ConfigError(
            f"No configuration for platform {key} (available: {available})",
            {"platform": key},
        ) from None
    return decode_arch_config(raw, key)


def load_config(path: Union[str, Path]) -> Config:
    """Read the configuration file."""
    path = Path(path)
    try:
        with open(path, "rb") as f:
            raw = tomli.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e.strerror or e}") from e
    except tomli.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    config = parse_config(raw)
    logger.debug("config_loaded", path=str(path), platforms=sorted(config.tables))
    return config


def load_platform_config(path: Union[str, Path], key: str) -> ArchConfig:
    """Read the configuration file and decode the entry for platform ``key``."""
    config = load_config(path)
    try:
        return platform_config(config, key)
    except ConfigError as e:
        raise ConfigError(f"{path}: {e}", {"path": str(path), **e.details}) from e
