"""Fetch-then-place pipeline for a single package."""
import asyncio
from pathlib import Path

import aiohttp

from workstation.archive import archive_kind, extract_entry
from workstation.errors import PackageError
from workstation.fetcher import fetch
from workstation.installer import install
from workstation.logging import get_logger
from workstation.progress import ProgressSink
from workstation.types import ArchivePackage, BinaryPackage, PackageSpec

logger = get_logger(__name__)


async def _install_binary(
    session: aiohttp.ClientSession, location: str, package: BinaryPackage, progress: ProgressSink
) -> Path:
    data = await fetch(session, package.url, progress)
    progress.set_message(f"Downloaded {package.name}")
    return install(location, package.name, data)


async def _install_archive(
    session: aiohttp.ClientSession, location: str, package: ArchivePackage, progress: ProgressSink
) -> Path:
    # Resolve the format first so an unsupported archive is never downloaded
    kind = archive_kind(package.archive)
    data = await fetch(session, package.archive, progress)
    progress.set_message(f"Downloaded {package.name}")
    content = await asyncio.to_thread(extract_entry, data, kind, package.bin)
    return install(location, package.name, content)


async def install_package(
    session: aiohttp.ClientSession, location: str, package: PackageSpec, progress: ProgressSink
) -> Path:
    """Download, unpack if needed, and install one package.

    Any failure is raised as PackageError naming the package.
    """
    logger.debug("package_started", package=package.name)
    try:
        if isinstance(package, ArchivePackage):
            return await _install_archive(session, location, package, progress)
        if isinstance(package, BinaryPackage):
            return await _install_binary(session, location, package, progress)
        raise TypeError(f"Unknown package type: {type(package).__name__}")
    except Exception as e:
        raise PackageError(package.name, e) from e
