from .model import (  # NOQA: F401
	NotFound,
	Directory,
	File,
	ResolvedTarget,
	DirectoryEntry,
	FilePayload,
	FileServiceError,
	EnumerationFailure,
	ReadFailure,
	StartupInvalidRoot,
)
from .resolver import resolve  # NOQA: F401
from .listing import render, entries  # NOQA: F401
from .responder import respond  # NOQA: F401

# EOF
