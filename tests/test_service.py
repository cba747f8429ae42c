import asyncio
import json
import os
from pathlib import Path

import pytest

import dirserve.services.files
from dirserve.config import ServerConfig
from dirserve.files.model import File, Directory, ReadFailure
from dirserve.files.resolver import resolve
from dirserve.http.model import HTTPRequest
from dirserve.http.parser import HTTPParser
from dirserve.model import mount
from dirserve.services.files import FileService
from dirserve.services.static import StaticService

from conftest import INDEX_HTML, A_TXT, TFetch, process


# --
# The reference scenario: a root with `index.html` and `docs/a.txt`


def test_scenario(fetch: TFetch) -> None:
	res = fetch("/")
	assert res.status == 200
	assert res.getHeader("Content-Type") == "text/html; charset=utf-8"
	body = res.payload.decode("utf8")
	assert body.count("<li>") == 2
	assert 'href="/index.html"' in body
	assert 'href="/docs"' in body

	res = fetch("/index.html")
	assert res.status == 200
	assert res.payload == INDEX_HTML
	assert len(res.payload) == 12
	assert res.getHeader("Content-Type") == "text/html"
	assert res.getHeader("Content-Length") == "12"

	res = fetch("/docs")
	assert res.status == 200
	body = res.payload.decode("utf8")
	assert body.count("<li>") == 1
	assert 'href="/docs/a.txt"' in body

	assert fetch("/missing").status == 404
	assert fetch("/../etc/passwd").status == 404


def test_file_content_types(config: ServerConfig, fetch: TFetch) -> None:
	(config.root / "data.json").write_bytes(b'{"a":1}')
	(config.root / "data.unknownext").write_bytes(b"???")
	res = fetch("/data.json")
	assert (res.status, res.payload) == (200, b'{"a":1}')
	assert res.getHeader("Content-Type") == "application/json"
	assert fetch("/data.unknownext").getHeader("Content-Type") == "text/plain"
	assert fetch("/docs/a.txt").payload == A_TXT


def test_trailing_slash_and_query(fetch: TFetch) -> None:
	assert fetch("/docs/").status == 200
	assert fetch("/docs?sort=name").status == 200
	assert fetch("/index.html?v=1").payload == INDEX_HTML


def test_encoded_paths(config: ServerConfig, fetch: TFetch) -> None:
	(config.root / "with space.txt").write_bytes(b"spaced")
	assert 'href="/with%20space.txt"' in fetch("/").payload.decode("utf8")
	assert fetch("/with%20space.txt").payload == b"spaced"


def test_undecodable_names(config: ServerConfig, fetch: TFetch) -> None:
	path: Path = config.root / os.fsdecode(b"caf\xe9.txt")
	try:
		path.write_bytes(b"latin-1")
	except OSError:
		pytest.skip("Filesystem requires UTF-8 file names")
	res = fetch("/")
	assert res.status == 200
	assert 'href="/caf%E9.txt"' in res.payload.decode("utf8")
	assert fetch("/caf%E9.txt").payload == b"latin-1"
	assert {_["linkPath"] for _ in json.loads(fetch("/?format=json").payload)} == {
		"/docs",
		"/index.html",
		"/caf%E9.txt",
	}


def test_symlink_loop(config: ServerConfig, fetch: TFetch) -> None:
	os.symlink("loop", config.root / "loop")
	res = fetch("/")
	assert res.status == 200
	assert 'href="/loop"' in res.payload.decode("utf8")
	assert fetch("/loop").status == 404


@pytest.mark.parametrize(
	"path", ["/../secret.txt", "/docs/../../secret.txt", "/%2e%2e/secret.txt"]
)
def test_traversal_is_not_found(fetch: TFetch, path: str) -> None:
	res = fetch(path)
	assert res.status == 404
	assert b"SECRET" not in res.payload


def test_not_found_leaks_nothing(config: ServerConfig, fetch: TFetch) -> None:
	res = fetch("/missing/file.txt")
	assert res.status == 404
	assert res.payload == b""
	assert res.getHeader("Content-Length") == "0"


def test_json_listing(fetch: TFetch) -> None:
	res = fetch("/docs?format=json")
	assert res.status == 200
	assert res.getHeader("Content-Type") == "application/json"
	assert json.loads(res.payload) == [
		{"name": "a.txt", "isDirectory": False, "size": 10, "linkPath": "/docs/a.txt"}
	]
	# Files ignore the format
	assert fetch("/index.html?format=json").payload == INDEX_HTML


def test_other_methods_are_not_found(fetch: TFetch) -> None:
	assert fetch("/", method="DELETE").status == 404


# --
# Failures happening after resolution are server errors


def test_read_failure(
	config: ServerConfig, fetch: TFetch, monkeypatch: pytest.MonkeyPatch
) -> None:
	# The file was resolved, and then deleted before being read
	gone: Path = config.root / "docs" / "gone.txt"
	monkeypatch.setattr(dirserve.services.files, "resolve", lambda path, root: File(gone))
	res = fetch("/docs/gone.txt")
	assert res.status == 500
	assert res.getHeader("Content-Type") == "text/plain"
	body = res.payload.decode("utf8")
	assert "Unable to read file 'docs/gone.txt'" in body
	assert str(config.root) not in body


def test_enumeration_failure(
	config: ServerConfig, fetch: TFetch, monkeypatch: pytest.MonkeyPatch
) -> None:
	gone: Path = config.root / "gone"
	monkeypatch.setattr(
		dirserve.services.files, "resolve", lambda path, root: Directory(gone)
	)
	res = fetch("/gone")
	assert res.status == 500
	assert "Unable to list directory 'gone'" in res.payload.decode("utf8")
	# No partial listing
	assert b"<li>" not in res.payload


def test_file_removed_after_resolution(config: ServerConfig) -> None:
	target = resolve("/docs/a.txt", config.root)
	assert isinstance(target, File)
	target.path.unlink()
	(request,) = [
		_
		for _ in HTTPParser().feed(b"GET /docs/a.txt HTTP/1.1\r\n\r\n")
		if isinstance(_, HTTPRequest)
	]
	with pytest.raises(ReadFailure) as e:
		asyncio.run(FileService(config).renderFile(request, target.path))
	assert e.value.path == "docs/a.txt"
	assert str(config.root) not in str(e.value)


# --
# Requests are independent from one another


def test_pipelined_requests(app, config: ServerConfig) -> None:
	payload = (
		b"GET /missing HTTP/1.1\r\nHost: localhost\r\n\r\n"
		b"GET /index.html HTTP/1.1\r\nHost: localhost\r\n\r\n"
		b"GET /docs HTTP/1.1\r\nHost: localhost\r\n\r\n"
	)
	responses = process(app, payload)
	assert [_.status for _ in responses] == [404, 200, 200]
	assert responses[1].payload == INDEX_HTML


def test_head_serialization(fetch: TFetch) -> None:
	head = fetch("/index.html").head()
	assert head.startswith(b"HTTP/1.1 200 OK\r\n")
	assert b"Content-Length: 12\r\n" in head
	assert head.endswith(b"\r\n\r\n")
	assert fetch("/missing").head().startswith(b"HTTP/1.1 404 Not Found\r\n")


# --
# Static mount


def test_static_service(config: ServerConfig, fetch: TFetch) -> None:
	app = mount(FileService(config), StaticService(config, "/tower"))
	# A directory is served through its index
	res = fetch("/tower", into=app)
	assert (res.status, res.payload) == (200, INDEX_HTML)
	assert fetch("/tower/", into=app).payload == INDEX_HTML
	assert fetch("/tower/index.html", into=app).payload == INDEX_HTML
	assert fetch("/tower/docs/a.txt", into=app).payload == A_TXT
	# No listings, and no escapes
	assert fetch("/tower/docs", into=app).status == 404
	assert fetch("/tower/../secret.txt", into=app).status == 404
	# The browser is still there
	assert b"<li>" in fetch("/docs", into=app).payload
	assert fetch("/towers", into=app).status == 404


def test_static_service_prefix(config: ServerConfig, fetch: TFetch) -> None:
	app = mount(StaticService(config, "static"), FileService(config))
	assert fetch("/static/docs/a.txt", into=app).payload == A_TXT
	assert fetch("/docs/a.txt", into=app).payload == A_TXT


# EOF
