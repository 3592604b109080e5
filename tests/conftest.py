import io
import logging
import tarfile
import zipfile
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer


def make_tar_gz(entries: Dict[str, bytes], dirs: Tuple[str, ...] = ()) -> bytes:
    """Build a gzipped tarball in memory, entries stored in dict order"""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        for name in dirs:
            info = tarfile.TarInfo(name)
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tf.addfile(info)
        for name, content in entries.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = 0o644
            tf.addfile(info, io.BytesIO(content))
    return buf.getvalue()


def make_zip(entries: Dict[str, bytes]) -> bytes:
    """Build a zip archive in memory"""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return buf.getvalue()


@dataclass
class Artifact:
    body: bytes
    status: int = 200
    chunked: bool = False
    headers: Dict[str, str] = field(default_factory=dict)


class ArtifactServer:
    """Real HTTP server handing out registered artifacts by path"""

    def __init__(self):
        self.artifacts: Dict[str, Artifact] = {}
        self.requests: List[str] = []
        self.request_headers: List[Dict[str, str]] = []
        app = web.Application()
        app.router.add_get("/{tail:.*}", self._handle)
        self.server = TestServer(app)

    def add(
        self,
        path: str,
        body: bytes,
        status: int = 200,
        chunked: bool = False,
        headers: Optional[Dict[str, str]] = None,
    ) -> str:
        self.artifacts[path] = Artifact(body, status, chunked, headers or {})
        return self.url(path)

    def url(self, path: str) -> str:
        return str(self.server.make_url(path))

    async def _handle(self, request: web.Request) -> web.StreamResponse:
        self.requests.append(request.path)
        self.request_headers.append(dict(request.headers))
        artifact = self.artifacts.get(request.path)
        if artifact is None:
            return web.Response(status=404, text="not found")
        if not artifact.chunked:
            return web.Response(status=artifact.status, body=artifact.body, headers=artifact.headers)

        response = web.StreamResponse(status=artifact.status, headers=artifact.headers)
        response.enable_chunked_encoding()
        await response.prepare(request)
        for i in range(0, len(artifact.body), 4):
            await response.write(artifact.body[i:i + 4])
        await response.write_eof()
        return response


@pytest_asyncio.fixture
async def artifact_server():
    """Start a local HTTP server for the duration of a test"""
    server = ArtifactServer()
    await server.server.start_server()
    try:
        yield server
    finally:
        await server.server.close()


@dataclass
class RecordingSink:
    """Progress sink that remembers every update"""
    totals: List[Optional[int]] = field(default_factory=list)
    positions: List[int] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)
    finished: Optional[str] = None

    def set_total(self, total: Optional[int]) -> None:
        self.totals.append(total)

    def set_position(self, position: int) -> None:
        self.positions.append(position)

    def set_message(self, message: str) -> None:
        self.messages.append(message)

    def finish(self, message: str) -> None:
        self.finished = message


class RecordingBoard:
    """Board handing out RecordingSinks keyed by package name"""

    def __init__(self):
        self.sinks: Dict[str, RecordingSink] = {}

    def add(self, name: str) -> RecordingSink:
        sink = RecordingSink()
        self.sinks[name] = sink
        return sink


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def board():
    return RecordingBoard()


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Point ~ at a temporary directory"""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers bound to streams that die with the test"""
    yield
    app_logger = logging.getLogger("workstation")
    app_logger.handlers = []
    app_logger.propagate = True
