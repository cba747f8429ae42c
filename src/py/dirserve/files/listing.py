import os
import stat
from pathlib import Path
from urllib.parse import quote

from ..utils.htmpl import Node, H, html
from .model import DirectoryEntry, EnumerationFailure

# --
# The listing renders the immediate children of a directory as an HTML
# index. All links are absolute from the server root, so they stay valid
# whichever directory is being browsed.

LISTING_CSS: str = """
:root {
    font-family: sans-serif;
    font-size: 14px;
    line-height: 1.35em;
    padding: 20px;
    background: #F0F0F0;
}
h1 {
    margin: 1.25em 0em;
    line-height: 1.25em;
}
ul {
    list-style: none;
    padding: 0px 10px;
}
li {
    margin: 0.5em 0em;
}
small {
    color: #808080;
}
"""

ICON_DIRECTORY: str = "📁"
ICON_FILE: str = "📄"


def relative(path: Path, root: Path) -> str:
	"""Returns the path relative to root, in POSIX form, empty for the root
	itself. Names that aren't valid UTF-8 keep their surrogate escapes."""
	rel: str = path.relative_to(root).as_posix()
	return "" if rel == "." else rel


def printable(text: str) -> str:
	"""Returns the text as valid UTF-8, replacing the bytes of file names
	that can't be decoded."""
	return os.fsencode(text).decode("utf-8", "replace")


def label(path: Path, root: Path) -> str:
	"""Returns the relative path as displayed in pages and messages."""
	return printable(relative(path, root))


def urlPath(rel: str) -> str:
	# Percent-encodes the raw bytes, so that the resolver gets the same
	# name back, even when it isn't valid UTF-8.
	return "/" + quote(os.fsencode(rel), safe="/")


def linkPath(path: Path, root: Path) -> str:
	"""Returns the URL-encoded, `/`-prefixed link for the given path."""
	return urlPath(relative(path, root))


def entries(dir: Path, root: Path) -> list[DirectoryEntry]:
	"""Lists the immediate children of `dir`, directories first and then
	by name. Raises `EnumerationFailure` when the directory or any of its
	entries can't be read."""
	res: list[DirectoryEntry] = []
	try:
		with os.scandir(dir) as items:
			for item in items:
				try:
					info = item.stat()
				except OSError:
					if not item.is_symlink():
						raise
					# A link whose target can't be reached is listed using its
					# own metadata
					info = item.stat(follow_symlinks=False)
				is_dir: bool = stat.S_ISDIR(info.st_mode)
				res.append(
					DirectoryEntry(
						name=printable(item.name),
						isDirectory=is_dir,
						size=None if is_dir else info.st_size,
						linkPath=linkPath(dir / item.name, root),
					)
				)
	except OSError as e:
		raise EnumerationFailure.FromOSError(label(dir, root) or "/", e) from e
	return sorted(res, key=lambda _: (not _.isDirectory, _.name))


def breadcrumbs(dir: Path, root: Path) -> list[Node | str]:
	"""Returns the `/`-separated links to the parents of the directory,
	the current directory being plain text."""
	chunks: list[str] = [_ for _ in relative(dir, root).split("/") if _]
	res: list[Node | str] = [H.a("/", href="/") if chunks else "/"]
	for i, name in enumerate(chunks):
		if i < len(chunks) - 1:
			res.append(H.a(printable(name), href=urlPath("/".join(chunks[: i + 1]))))
			res.append("/")
		else:
			res.append(printable(name))
	return res


def entryNode(entry: DirectoryEntry) -> Node:
	return H.li(
		f"{ICON_DIRECTORY if entry.isDirectory else ICON_FILE} ",
		H.a(entry.name, href=entry.linkPath),
		None if entry.size is None else H.small(f" - {entry.size} bytes"),
	)


def render(dir: Path, root: Path) -> str:
	"""Renders the listing of `dir` as an HTML document. Raises
	`EnumerationFailure` instead of returning a partial listing."""
	items: list[DirectoryEntry] = entries(dir, root)
	title: str = f"Listing for /{label(dir, root)}"
	return "".join(
		html(
			H.html(
				H.head(
					H.meta(charset="utf-8"),
					H.meta(
						name="viewport",
						content="width=device-width, initial-scale=1.0",
					),
					H.title(title),
					H.style(LISTING_CSS),
				),
				H.body(
					H.h1("Listing for ", breadcrumbs(dir, root)),
					H.ul([entryNode(_) for _ in items]),
				),
			),
			doctype="html",
		)
	)


# EOF
