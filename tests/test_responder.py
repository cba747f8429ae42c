from pathlib import Path

import pytest

from dirserve.config import ServerConfig
from dirserve.files.model import FilePayload, ReadFailure
from dirserve.files.responder import respond
from dirserve.utils.files import contentType

from conftest import INDEX_HTML


@pytest.mark.parametrize(
	"name,expected",
	[
		("index.html", "text/html"),
		("data.json", "application/json"),
		("notes.txt", "text/plain"),
		("image.png", "image/png"),
		("style.CSS", "text/css"),
		("archive.gz", "application/x-gzip"),
		("archive.tar.bz2", "application/x-bzip"),
		("importmap.json", "application/importmap+json"),
		("unknown.xyz-not-a-type", "text/plain"),
		("Makefile", "text/plain"),
		(".hidden", "text/plain"),
	],
)
def test_content_type(name: str, expected: str) -> None:
	assert contentType(name) == expected
	assert contentType(Path("some/dir") / name) == expected


def test_respond(config: ServerConfig) -> None:
	assert respond(config.root / "index.html") == FilePayload(INDEX_HTML, "text/html")


def test_respond_binary(config: ServerConfig) -> None:
	data = bytes(range(256)) * 64
	(config.root / "blob.bin").write_bytes(data)
	payload = respond(config.root / "blob.bin")
	assert payload.content == data
	assert payload.contentType == "application/octet-stream"


def test_respond_missing(config: ServerConfig) -> None:
	with pytest.raises(ReadFailure) as e:
		respond(config.root / "docs" / "gone.txt", "docs/gone.txt")
	assert e.value.path == "docs/gone.txt"
	assert str(e.value).startswith("Unable to read file 'docs/gone.txt'")


def test_respond_directory(config: ServerConfig) -> None:
	# Reading a directory fails like any other unreadable file
	with pytest.raises(ReadFailure):
		respond(config.root / "docs")


# EOF
