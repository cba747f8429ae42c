import asyncio

from ..config import ServerConfig
from ..decorators import on
from ..model import Service
from ..http.model import HTTPRequest, HTTPResponse
from ..files.model import NotFound, Directory, File, ReadFailure, ResolvedTarget
from ..files.resolver import resolve
from ..files.listing import label
from ..files.responder import respond
from ..utils.logging import warning

INDEX: str = "index.html"


class StaticService(Service):
	"""Serves files from the root under a prefix, without listings: a
	directory is served through its `index.html`, if any."""

	def __init__(self, config: ServerConfig, prefix: str = "/static"):
		super().__init__(prefix=prefix if prefix.startswith("/") else f"/{prefix}")
		self.config: ServerConfig = config

	def lookup(self, path: str) -> ResolvedTarget:
		target = resolve(path, self.config.root)
		if isinstance(target, Directory):
			return resolve(f"{path.rstrip('/')}/{INDEX}", self.config.root)
		else:
			return target

	# Routes under the prefix take precedence over the browser's
	@on(priority=1, GET=("", "/", "/{path:any}"))
	async def serve(self, request: HTTPRequest, path: str = "") -> HTTPResponse:
		match await asyncio.to_thread(self.lookup, path):
			case File(path=local_path):
				try:
					payload = await asyncio.to_thread(
						respond, local_path, label(local_path, self.config.root)
					)
				except ReadFailure as e:
					warning(str(e), Path=request.path)
					return request.fail(str(e))
				return request.respond(payload.content, payload.contentType)
			case NotFound() | Directory():
				return request.notFound()


# EOF
