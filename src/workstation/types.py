"""Core type definitions"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

ArchiveKind = Enum("ArchiveKind", ["TAR_GZ", "ZIP"])


@dataclass(frozen=True)
class ArchivePackage:
    """Executable shipped as a named entry inside an archive"""
    name: str
    bin: str
    archive: str


@dataclass(frozen=True)
class BinaryPackage:
    """Executable downloaded as-is"""
    name: str
    url: str


PackageSpec = Union[ArchivePackage, BinaryPackage]


@dataclass(frozen=True)
class ArchConfig:
    """Install location and packages for one platform"""
    location: str
    packages: Tuple[PackageSpec, ...] = ()


@dataclass(frozen=True)
class Config:
    """Top-level configuration: undecoded platform tables keyed by platform"""
    tables: Dict[str, Mapping[str, Any]] = field(default_factory=dict)


@dataclass(frozen=True)
class PackageReport:
    """Outcome of installing a single package"""
    name: str
    success: bool
    message: str
    installed_path: Optional[Path] = None
