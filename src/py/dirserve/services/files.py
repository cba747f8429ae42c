import asyncio
from pathlib import Path

from ..config import ServerConfig
from ..decorators import on
from ..model import Service
from ..http.model import HTTPRequest, HTTPResponse
from ..files.model import (
	NotFound,
	Directory,
	File,
	FileServiceError,
)
from ..files.resolver import resolve
from ..files.listing import render, entries, label
from ..files.responder import respond
from ..utils.logging import info, warning


class FileService(Service):
	"""Serves the root directory for browsing: directories are rendered as
	HTML listings and files are returned as is."""

	def __init__(self, config: ServerConfig, *, prefix: str | None = None):
		super().__init__(prefix=prefix)
		self.config: ServerConfig = config

	@property
	def root(self) -> Path:
		return self.config.root

	async def renderDir(
		self, request: HTTPRequest, path: Path, format: str
	) -> HTTPResponse:
		match format:
			# Listings are also available as JSON
			case "json":
				return request.returns(await asyncio.to_thread(entries, path, self.root))
			case _:
				return request.respondHTML(
					await asyncio.to_thread(render, path, self.root)
				)

	async def renderFile(self, request: HTTPRequest, path: Path) -> HTTPResponse:
		payload = await asyncio.to_thread(respond, path, label(path, self.root))
		info("Read", Path=request.path, Size=len(payload.content))
		return request.respond(payload.content, payload.contentType)

	@on(GET=("/", "/{path:any}"))
	async def read(self, request: HTTPRequest, path: str = "") -> HTTPResponse:
		format: str = request.param("format", "html") or "html"
		try:
			match await asyncio.to_thread(resolve, path, self.root):
				case NotFound(reason=reason):
					info("Path not found", Path=request.path, Reason=reason)
					return request.notFound()
				case Directory(path=local_path):
					return await self.renderDir(request, local_path, format)
				case File(path=local_path):
					return await self.renderFile(request, local_path)
		except FileServiceError as e:
			warning(str(e), Path=request.path)
			return request.fail(str(e))


# EOF
