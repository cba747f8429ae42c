from pathlib import Path
from typing import NamedTuple, TypeAlias

# -----------------------------------------------------------------------------
#
# RESOLVED TARGETS
#
# -----------------------------------------------------------------------------
# A request path resolves to exactly one of these, call sites are expected
# to `match` on all three.


class NotFound(NamedTuple):
	"""The request path is missing, or is not contained in the root. The
	reason is only meant for logs."""

	reason: str = "missing"


class Directory(NamedTuple):
	"""A canonical path to a directory within the root."""

	path: Path


class File(NamedTuple):
	"""A canonical path to anything that is not a directory within the
	root."""

	path: Path


ResolvedTarget: TypeAlias = NotFound | Directory | File

# -----------------------------------------------------------------------------
#
# LISTINGS & PAYLOADS
#
# -----------------------------------------------------------------------------


class DirectoryEntry(NamedTuple):
	"""One immediate child of a listed directory."""

	name: str
	isDirectory: bool
	# Directories have no meaningful size, so it is `None` for them
	size: int | None
	# Path relative to the root, `/`-prefixed and URL-encoded
	linkPath: str


class FilePayload(NamedTuple):
	content: bytes
	contentType: str


# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class FileServiceError(Exception):
	"""Base class for filesystem failures. The message only mentions
	the root-relative `path`, never the absolute one."""

	ACTION: str = "Unable to access"

	def __init__(self, path: str, reason: str | None = None):
		self.path: str = path
		self.reason: str = reason or "unknown error"
		super().__init__(f"{self.ACTION} '{path}': {self.reason}")

	@classmethod
	def FromOSError(cls, path: str, error: OSError) -> "FileServiceError":
		return cls(path, error.strerror or error.__class__.__name__)


class EnumerationFailure(FileServiceError):
	"""Listing a directory, or reading one of its entries' metadata
	failed."""

	ACTION = "Unable to list directory"


class ReadFailure(FileServiceError):
	"""Reading a file that was resolved as existing failed."""

	ACTION = "Unable to read file"


class StartupInvalidRoot(FileServiceError):
	"""The configured root is missing or is not a directory."""

	ACTION = "Invalid root directory"


# EOF
