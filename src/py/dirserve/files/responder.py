from pathlib import Path

from ..utils.files import contentType
from .model import FilePayload, ReadFailure
from .listing import printable


def respond(file: Path, name: str | None = None) -> FilePayload:
	"""Reads the whole file in memory, guessing its content type from its
	name. Raises `ReadFailure` when the file can't be read, typically when
	it was removed after being resolved. The `name` is what failures
	report, defaulting to the file's name."""
	try:
		content: bytes = file.read_bytes()
	except OSError as e:
		raise ReadFailure.FromOSError(name or printable(file.name), e) from e
	return FilePayload(content, contentType(file))


# EOF
