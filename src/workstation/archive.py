"""Single-entry extraction from downloaded archives."""
import io
import tarfile
import zipfile
import zlib
from urllib.parse import urlsplit

from workstation.errors import CorruptArchiveError, EntryNotFoundError, UnsupportedFormatError
from workstation.logging import get_logger
from workstation.types import ArchiveKind

logger = get_logger(__name__)

ARCHIVE_SUFFIXES = {
    ".tar.gz": ArchiveKind.TAR_GZ,
    ".zip": ArchiveKind.ZIP,
}


def archive_kind(url: str) -> ArchiveKind:
    """Determine the container format from the suffix of the URL path."""
    path = urlsplit(url).path
    for suffix, kind in ARCHIVE_SUFFIXES.items():
        if path.endswith(suffix):
            return kind
    raise UnsupportedFormatError(url)


def _extract_tar_gz(data: bytes, entry_name: str) -> bytes:
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r|gz") as archive:
            for member in archive:
                if member.name != entry_name:
                    continue
                # Links and directories carry no content of their own
                if not member.isfile():
                    raise EntryNotFoundError(entry_name)
                return archive.extractfile(member).read()
    except (tarfile.TarError, zlib.error, EOFError, OSError) as e:
        raise CorruptArchiveError("tar.gz", str(e)) from e
    raise EntryNotFoundError(entry_name)


def _extract_zip(data: bytes, entry_name: str) -> bytes:
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            try:
                info = archive.getinfo(entry_name)
            except KeyError:
                raise EntryNotFoundError(entry_name) from None
            if info.is_dir():
                raise EntryNotFoundError(entry_name)
            return archive.read(info)
    # NotImplementedError: unknown compression method, RuntimeError: encrypted entry
    except (zipfile.BadZipFile, zlib.error, EOFError, OSError, NotImplementedError, RuntimeError) as e:
        raise CorruptArchiveError("zip", str(e)) from e


EXTRACTORS = {
    ArchiveKind.TAR_GZ: _extract_tar_gz,
    ArchiveKind.ZIP: _extract_zip,
}


def extract_entry(data: bytes, kind: ArchiveKind, entry_name: str) -> bytes:
    """Return the content of the entry named exactly ``entry_name``.

    Entry metadata (mode, ownership) is ignored; only the bytes come back.
    Links are not followed: a link with the requested name is not found.
    """
    content = EXTRACTORS[kind](data, entry_name)
    logger.debug(
        "entry_extracted", format=kind.name.lower(), entry=entry_name, size=len(content)
    )
    return content
