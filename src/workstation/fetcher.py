"""Artifact download with progress reporting."""
import asyncio
from typing import Optional

import aiohttp

from workstation.errors import BadStatusError, HttpTransportError
from workstation.logging import get_logger
from workstation.progress import ProgressSink

logger = get_logger(__name__)

CHUNK_SIZE = 8192

# Servers must not compress on our behalf; a Content-Encoding they still send
# belongs to the stored object and is kept.
REQUEST_HEADERS = {"Accept-Encoding": "identity"}


def create_session(timeout: Optional[float] = None) -> aiohttp.ClientSession:
    """Session that hands back response bodies byte for byte.

    ``timeout`` caps each request in seconds; ``None`` waits forever.
    """
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=timeout),
        headers=REQUEST_HEADERS,
        auto_decompress=False,
    )


async def fetch(
    session: aiohttp.ClientSession,
    url: str,
    progress: ProgressSink,
    chunk_size: int = CHUNK_SIZE,
) -> bytes:
    """Download ``url`` into memory, reporting cumulative bytes to ``progress``.

    Responses without a Content-Length are accepted; the sink then gets an
    indeterminate total.
    """
    logger.info("fetch_started", url=url)
    try:
        async with session.get(url) as response:
            if not 200 <= response.status < 300:
                logger.warning(
                    "fetch_bad_status", url=url, status=response.status, reason=response.reason
                )
                raise BadStatusError(url, response.status, response.reason)

            total = response.content_length
            if total is None:
                logger.warning("fetch_no_content_length", url=url)
            progress.set_total(total)

            buf = bytearray()
            async for chunk in response.content.iter_chunked(chunk_size):
                buf.extend(chunk)
                progress.set_position(len(buf))

    except aiohttp.ClientError as e:
        raise HttpTransportError(url, str(e) or e.__class__.__name__) from e
    except asyncio.TimeoutError as e:
        raise HttpTransportError(url, "timed out") from e

    logger.info("fetch_complete", url=url, size=len(buf), expected_size=total)
    return bytes(buf)
