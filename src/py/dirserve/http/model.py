from enum import Enum
from typing import NamedTuple, TypeAlias, Union

from ..utils.io import DEFAULT_ENCODING
from .api import ResponseFactory
from .status import HTTP_STATUS

# -----------------------------------------------------------------------------
#
# HEADERS
#
# -----------------------------------------------------------------------------

# Canonical names by lowercase name, filled as headers are seen
HEADER_NAMES: dict[str, str] = {}


def headername(name: str) -> str:
	"""Returns the canonical `Kebab-Case` form of a header name, so that
	lookups are case insensitive."""
	key: str = name.lower()
	res: str | None = HEADER_NAMES.get(key)
	if res is None:
		res = HEADER_NAMES[key] = "-".join(_.capitalize() for _ in key.split("-"))
	return res


# -----------------------------------------------------------------------------
#
# PARSED ATOMS
#
# -----------------------------------------------------------------------------


class HTTPRequestLine(NamedTuple):
	"""The request line, with the target split in path and query string,
	both still percent-encoded."""

	method: str
	path: str
	query: str
	protocol: str


class HTTPHeaders(NamedTuple):
	"""The headers by canonical name, along with the ones that drive the
	parsing of the body."""

	headers: dict[str, str]
	contentType: str | None = None
	contentLength: int | None = None


class HTTPProcessingStatus(Enum):
	"""Parser milestones, and the reasons a connection stops being read."""

	Processing = 0
	Body = 1
	Complete = 2
	Timeout = 10
	NoData = 11


HTTPAtom: TypeAlias = Union[
	HTTPRequestLine, HTTPHeaders, HTTPProcessingStatus, "HTTPRequest"
]

# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class HTTPRequestError(Exception):
	"""Raised by handlers to bail out with an error response, which is a
	500 unless a status is given."""

	def __init__(
		self,
		message: str,
		status: int | None = None,
		contentType: str | None = None,
	):
		super().__init__(message)
		self.message: str = message
		self.status: int | None = status
		self.contentType: str | None = contentType


# -----------------------------------------------------------------------------
#
# REQUEST
#
# -----------------------------------------------------------------------------


class HTTPRequest(ResponseFactory["HTTPResponse"]):
	"""A fully read request. Its responses use the same protocol."""

	__slots__ = ["method", "path", "query", "protocol", "head", "body"]

	def __init__(
		self,
		method: str,
		path: str,
		query: dict[str, str] | None = None,
		head: HTTPHeaders | None = None,
		body: bytes = b"",
		protocol: str = "HTTP/1.1",
	):
		super().__init__()
		self.method: str = method
		self.path: str = path
		self.query: dict[str, str] = query or {}
		self.protocol: str = protocol
		self.head: HTTPHeaders = head or HTTPHeaders({})
		self.body: bytes = body

	@property
	def headers(self) -> dict[str, str]:
		return self.head.headers

	def header(self, name: str) -> str | None:
		return self.head.headers.get(headername(name))

	def param(self, name: str, default: str | None = None) -> str | None:
		return self.query.get(name, default)

	@property
	def keepAlive(self) -> bool:
		"""Tells if the connection can be reused once this request is
		answered. HTTP/1.0 connections are always closed."""
		if self.protocol == "HTTP/1.0":
			return False
		return (self.header("Connection") or "").lower() != "close"

	def respond(
		self,
		content: str | bytes | None = None,
		contentType: str | None = None,
		*,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> "HTTPResponse":
		return HTTPResponse.Create(
			content,
			contentType,
			status=status,
			headers=headers,
			message=message,
			protocol=self.protocol,
		)

	def __str__(self) -> str:
		return f"Request({self.method} {self.path}{f' {self.query}' if self.query else ''})"


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class HTTPResponse:
	"""A response with its whole payload in memory."""

	__slots__ = ["protocol", "status", "message", "headers", "payload"]

	@staticmethod
	def Create(
		content: str | bytes | None = None,
		contentType: str | None = None,
		*,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
		protocol: str = "HTTP/1.1",
	) -> "HTTPResponse":
		"""Creates a response from text (UTF-8 encoded) or bytes. The
		`Content-Length` is always set, even without content, so that the
		client knows where the next response starts."""
		if content is None:
			payload: bytes = b""
		elif isinstance(content, str):
			payload = content.encode(DEFAULT_ENCODING)
		elif isinstance(content, bytes):
			payload = content
		else:
			raise ValueError(f"Unsupported content {type(content)}: {content!r}")
		res_headers: dict[str, str] = {
			headername(k): v for k, v in (headers or {}).items()
		}
		if contentType:
			res_headers["Content-Type"] = contentType
		res_headers["Content-Length"] = str(len(payload))
		return HTTPResponse(
			protocol,
			status,
			message or HTTP_STATUS.get(status, "Unknown status"),
			res_headers,
			payload,
		)

	def __init__(
		self,
		protocol: str,
		status: int,
		message: str,
		headers: dict[str, str],
		payload: bytes = b"",
	):
		self.protocol: str = protocol
		self.status: int = status
		self.message: str = message
		self.headers: dict[str, str] = headers
		self.payload: bytes = payload

	def getHeader(self, name: str) -> str | None:
		return self.headers.get(headername(name))

	def head(self) -> bytes:
		"""Returns the status line and headers, up to the empty line that
		precedes the payload."""
		lines: list[str] = [f"{self.protocol} {self.status} {self.message}"]
		lines += [f"{k}: {v}" for k, v in self.headers.items()]
		# Header values are ASCII, as links are percent-encoded
		return ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")

	def __str__(self) -> str:
		return f"Response({self.protocol} {self.status} {self.message} {self.headers})"


# EOF
