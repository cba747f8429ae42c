import io
from pathlib import Path

import pytest

from dirserve.files.model import DirectoryEntry
from dirserve.utils import logging
from dirserve.utils.htmpl import H, html, text
from dirserve.utils.json import json, asPrimitive


@pytest.fixture
def stream(monkeypatch: pytest.MonkeyPatch) -> io.StringIO:
	res = io.StringIO()
	monkeypatch.setattr(logging, "ERR", res)
	monkeypatch.setattr(logging, "LOG_LEVEL", logging.LogLevel.Info)
	return res


def test_log_context(stream: io.StringIO) -> None:
	logging.info("Read", Path="/docs/a.txt", Size=10)
	out = stream.getvalue()
	assert "[dirserve]" in out
	assert "Read" in out
	assert "/docs/a.txt" in out and "10" in out


def test_log_level(stream: io.StringIO) -> None:
	logging.debug("Hidden")
	assert stream.getvalue() == ""
	assert not logging.logged(logging.debug)
	assert logging.logged(logging.warning)
	logging.setLevel("debug")
	logging.debug("Shown")
	assert "Shown" in stream.getvalue()
	assert logging.logged(logging.debug)
	logging.setLevel(logging.LogLevel.Error)
	logging.warning("Dropped")
	logging.error("Kept", "CODE")
	out = stream.getvalue()
	assert "Dropped" not in out
	assert "Kept" in out and "CODE" in out


def test_log_exception(stream: io.StringIO) -> None:
	try:
		raise ValueError("Boom")
	except ValueError as e:
		assert logging.exception(e, "While testing") is e
	out = stream.getvalue()
	assert "[ValueError] Boom" in out
	assert "test_log_exception" in out


def test_format_data() -> None:
	assert logging.formatData(None) == "◌"
	assert logging.formatData("a b") == "'a b'"
	assert logging.formatData(True) == "✓"
	assert logging.formatData(1.0) == "1.00"
	assert logging.formatData([1, "a"]) == "1,a"


# --
# HTML


def test_htmpl_escaping() -> None:
	node = H.a("<script>", href='/a"b', _="link")
	assert str(node) == '<a href="/a&quot;b" class="link">&lt;script&gt;</a>'
	assert str(text("a & b")) == "a &amp; b"


def test_htmpl_structure() -> None:
	doc = "".join(
		html(
			H.ul([H.li("a"), H.li("b")], None, H.li(H.small(" - 1 bytes"))),
			H.meta(charset="utf-8"),
			doctype="html",
		)
	)
	assert doc == (
		"<!DOCTYPE html>\n"
		"<ul><li>a</li><li>b</li><li><small> - 1 bytes</small></li></ul>"
		'<meta charset="utf-8">'
	)
	with pytest.raises(AttributeError):
		H.blink("nope")


# --
# JSON


def test_json() -> None:
	entry = DirectoryEntry("a.txt", False, 10, "/a.txt")
	assert asPrimitive([entry, Path("/a")]) == [
		{"name": "a.txt", "isDirectory": False, "size": 10, "linkPath": "/a.txt"},
		"/a",
	]
	assert json({"a": None}) == b'{"a": null}'


# EOF
