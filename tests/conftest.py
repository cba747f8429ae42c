import asyncio
from pathlib import Path
from typing import Callable

import pytest

from dirserve.config import ServerConfig
from dirserve.http.model import HTTPRequest, HTTPResponse
from dirserve.http.parser import HTTPParser
from dirserve.model import Application, mount
from dirserve.routing import awaited
from dirserve.services.files import FileService

# That's exactly 12 bytes
INDEX_HTML: bytes = b"<h1>Hi</h1>\n"
A_TXT: bytes = b"Hello, A!\n"

TFetch = Callable[..., HTTPResponse]


@pytest.fixture
def site(tmp_path: Path) -> Path:
	"""A root with `index.html` and `docs/a.txt`, next to a file that is
	outside of it."""
	root = tmp_path / "www"
	(root / "docs").mkdir(parents=True)
	(root / "index.html").write_bytes(INDEX_HTML)
	(root / "docs" / "a.txt").write_bytes(A_TXT)
	(tmp_path / "secret.txt").write_bytes(b"TOP SECRET")
	return root


@pytest.fixture
def config(site: Path) -> ServerConfig:
	return ServerConfig.Make(site, port=0)


@pytest.fixture
def app(config: ServerConfig) -> Application:
	return mount(FileService(config))


def process(app: Application, payload: bytes) -> list[HTTPResponse]:
	"""Feeds the raw payload through the parser and the application,
	returning one response per parsed request."""
	requests = [_ for _ in HTTPParser().feed(payload) if isinstance(_, HTTPRequest)]

	async def main() -> list[HTTPResponse]:
		return [await awaited(app.process(_)) for _ in requests]

	return asyncio.run(main())


@pytest.fixture
def fetch(app: Application) -> TFetch:
	def f(path: str, method: str = "GET", into: Application | None = None) -> HTTPResponse:
		payload = f"{method} {path} HTTP/1.1\r\nHost: localhost\r\n\r\n".encode("latin-1")
		responses = process(into or app, payload)
		assert len(responses) == 1
		return responses[0]

	return f


# EOF
