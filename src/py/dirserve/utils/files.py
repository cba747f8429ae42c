import mimetypes
from pathlib import Path

mimetypes.init()

# Used when the name gives no hint about the content
DEFAULT_CONTENT_TYPE: str = "text/plain"

# Extensions that `mimetypes` maps to an encoding rather than a type
MIME_TYPES: dict[str, str] = dict(
	bz2="application/x-bzip",
	gz="application/x-gzip",
)

# Well-known file names that have a more specific type than their extension
MIME_NAMES: dict[str, str] = {
	"importmap.json": "application/importmap+json",
}


def contentType(path: Path | str) -> str:
	"""Guesses the content type from the given path, defaulting to
	`text/plain`."""
	name: str = Path(path).name
	if name in MIME_NAMES:
		return MIME_NAMES[name]
	ext: str | None = name.rsplit(".", 1)[-1].lower() if "." in name else None
	return (
		res
		if ext and (res := MIME_TYPES.get(ext))
		else mimetypes.guess_type(name)[0] or DEFAULT_CONTENT_TYPE
	)


# EOF
