"""Concurrent installation of every configured package."""
import asyncio
from typing import List, Optional

import aiohttp

from workstation.errors import PackageError, log_error
from workstation.fetcher import create_session
from workstation.logging import get_logger
from workstation.progress import ProgressBoard
from workstation.resolver import install_package
from workstation.types import ArchConfig, PackageReport, PackageSpec

logger = get_logger(__name__)


async def _run_unit(
    session: aiohttp.ClientSession,
    location: str,
    package: PackageSpec,
    board: ProgressBoard,
    semaphore: Optional[asyncio.Semaphore],
) -> PackageReport:
    progress = board.add(package.name)
    try:
        if semaphore is None:
            path = await install_package(session, location, package, progress)
        else:
            async with semaphore:
                path = await install_package(session, location, package, progress)
    except Exception as e:
        error = e if isinstance(e, PackageError) else PackageError(package.name, e)
        log_error(logger, error, "package_failed", package=package.name)
        message = f"Error installing {package.name}: {error.cause}"
        progress.finish(message)
        return PackageReport(name=package.name, success=False, message=message)

    logger.info("package_installed", package=package.name, path=str(path))
    message = f"Installed {package.name}"
    progress.finish(message)
    return PackageReport(name=package.name, success=True, message=message, installed_path=path)


async def run_setup(
    arch_config: ArchConfig,
    board: ProgressBoard,
    *,
    max_concurrency: Optional[int] = None,
    timeout: Optional[float] = None,
) -> List[PackageReport]:
    """Install all packages of ``arch_config`` concurrently.

    A failing package never affects the others; every outcome is returned,
    in config order. Concurrency is unbounded unless ``max_concurrency`` is
    given, and ``timeout`` caps each download in seconds.
    """
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    logger.info(
        "setup_started",
        location=arch_config.location,
        packages=len(arch_config.packages),
        max_concurrency=max_concurrency,
    )

    async with create_session(timeout) as session:
        reports = await asyncio.gather(
            *(
                _run_unit(session, arch_config.location, package, board, semaphore)
                for package in arch_config.packages
            )
        )

    failed = [r.name for r in reports if not r.success]
    logger.info("setup_complete", installed=len(reports) - len(failed), failed=failed)
    return list(reports)

