import os
import stat
from pathlib import Path
from urllib.parse import unquote_to_bytes

from .model import NotFound, Directory, File, ResolvedTarget


def contains(root: Path, path: Path) -> bool:
	"""Tells if `path` is `root` or one of its descendants. Both are
	expected to be absolute and normalized."""
	return path == root or root in path.parents


def normalize(requestPath: str) -> list[str] | None:
	"""Decodes the request path and returns its segments, with `.` and `..`
	collapsed. Returns `None` when a `..` would climb above the root, or
	when the path holds a NUL byte.

	Percent-escapes are decoded as filesystem bytes, so that names that
	aren't valid UTF-8 resolve to the entry they were listed for."""
	decoded: str = os.fsdecode(unquote_to_bytes(requestPath))
	if "\x00" in decoded:
		return None
	parts: list[str] = []
	for segment in decoded.split("/"):
		if segment in ("", "."):
			continue
		elif segment == "..":
			if not parts:
				return None
			parts.pop()
		else:
			parts.append(segment)
	return parts


def resolve(requestPath: str, root: Path) -> ResolvedTarget:
	"""Resolves the URL path `requestPath` (percent-encoded, with or without
	a leading slash, empty for the root) within `root`, which must be an
	absolute canonical path.

	The lexical path is checked first, then its canonical form (with
	symlinks resolved), so that neither `..` segments nor symlinks can
	reach outside of `root`."""
	parts = normalize(requestPath)
	if parts is None:
		return NotFound("outside root")
	local: Path = root.joinpath(*parts)
	if not contains(root, local):
		return NotFound("outside root")
	try:
		canonical: Path = local.resolve(strict=True)
	except (OSError, RuntimeError):
		# Missing paths, dangling links and symlink loops
		return NotFound("missing")
	if not contains(root, canonical):
		return NotFound("outside root")
	try:
		mode: int = os.stat(canonical).st_mode
	except OSError:
		return NotFound("missing")
	return Directory(canonical) if stat.S_ISDIR(mode) else File(canonical)


# EOF
