from typing import Iterator, ClassVar, Literal
from urllib.parse import unquote_plus

from ..utils.io import LineParser
from .model import (
	HTTPRequest,
	HTTPRequestLine,
	HTTPHeaders,
	HTTPAtom,
	HTTPProcessingStatus,
	headername,
)

# --
# The parser is incremental: chunks are fed as they are received from the
# socket, and complete requests come out as soon as they are available. All
# the sub-parsers share the same `feed(chunk, start)` protocol, returning a
# value (`None` when more data is needed) and how many bytes they consumed.


class MessageParser:
	"""Parses the request line."""

	__slots__ = ["line", "value"]

	def __init__(self) -> None:
		self.line: LineParser = LineParser()
		self.value: HTTPRequestLine | None = None

	def flush(self) -> HTTPRequestLine | None:
		res = self.value
		self.reset()
		return res

	def reset(self) -> "MessageParser":
		self.line.reset()
		self.value = None
		return self

	def feed(self, chunk: bytes, start: int = 0) -> tuple[bool | None, int]:
		line, read = self.line.feed(chunk, start)
		if line is None:
			return None, read
		text: str = line.decode("latin-1").strip()
		if not text:
			# Blank lines may separate pipelined requests
			return None, read
		parts: list[str] = text.split(" ")
		method: str = parts[0].upper()
		if len(parts) >= 3:
			target, protocol = " ".join(parts[1:-1]), parts[-1]
		else:
			# No protocol, this is a simple HTTP/1.0 request
			target, protocol = (parts[1] if len(parts) > 1 else "/"), "HTTP/1.0"
		path, _, query = target.partition("?")
		self.value = HTTPRequestLine(method, path, query, protocol)
		return True, read


class HeadersParser:
	"""Parses header lines, up to the empty line that ends them."""

	__slots__ = ["line", "headers", "contentType", "contentLength"]

	def __init__(self) -> None:
		self.line: LineParser = LineParser()
		self.headers: dict[str, str] = {}
		self.contentType: str | None = None
		self.contentLength: int | None = None

	def flush(self) -> HTTPHeaders:
		res = HTTPHeaders(self.headers, self.contentType, self.contentLength)
		self.reset()
		return res

	def reset(self) -> "HeadersParser":
		self.line.reset()
		self.headers = {}
		self.contentType = None
		self.contentLength = None
		return self

	def feed(
		self, chunk: bytes, start: int = 0
	) -> tuple[str | Literal[False] | None, int]:
		"""Returns the name of the header that was read, `False` once
		the headers are over, and `None` when no complete line is available
		or the line is not a header."""
		line, read = self.line.feed(chunk, start)
		if line is None:
			return None, read
		elif not line:
			return False, read
		name, sep, value = line.decode("latin-1").partition(":")
		if not sep:
			return None, read
		name = headername(name.strip())
		value = value.strip()
		if name == "Content-Length":
			self.contentLength = int(value) if value.isdigit() else None
		elif name == "Content-Type":
			self.contentType = value
		self.headers[name] = value
		return name, read


class BodyLengthParser:
	"""Reads a body of a known length."""

	__slots__ = ["expected", "data"]

	def __init__(self) -> None:
		self.expected: int = 0
		self.data: bytearray = bytearray()

	def flush(self) -> bytes:
		res = bytes(self.data)
		self.reset()
		return res

	def reset(self, length: int = 0) -> "BodyLengthParser":
		self.expected = length
		self.data.clear()
		return self

	def feed(self, chunk: bytes, start: int = 0) -> tuple[bool | None, int]:
		"""Returns `True` once the whole body was read."""
		n: int = min(len(chunk) - start, self.expected - len(self.data))
		self.data += chunk[start : start + n]
		return (True if len(self.data) >= self.expected else None), n


class HTTPParser:
	"""Turns a stream of bytes into request atoms: the request line, the
	headers, and then the complete `HTTPRequest` followed by
	`HTTPProcessingStatus.Complete`."""

	# Other methods are complete as soon as their headers are read
	METHOD_HAS_BODY: ClassVar[set[str]] = {"POST", "PUT", "PATCH"}

	def __init__(self) -> None:
		self.message: MessageParser = MessageParser()
		self.headers: HeadersParser = HeadersParser()
		self.bodyLength: BodyLengthParser = BodyLengthParser()
		self.parser: MessageParser | HeadersParser | BodyLengthParser = self.message
		self.requestLine: HTTPRequestLine | None = None
		self.requestHeaders: HTTPHeaders | None = None

	def request(self, body: bytes = b"") -> HTTPRequest:
		line = self.requestLine
		if line is None:
			raise RuntimeError("Request line was not parsed")
		return HTTPRequest(
			method=line.method,
			path=line.path,
			query=parseQuery(line.query),
			head=self.requestHeaders,
			body=body,
			protocol=line.protocol,
		)

	def complete(self, body: bytes = b"") -> Iterator[HTTPAtom]:
		yield self.request(body)
		yield HTTPProcessingStatus.Complete
		self.parser = self.message.reset()

	def feed(self, chunk: bytes) -> Iterator[HTTPAtom]:
		size: int = len(chunk)
		offset: int = 0
		while offset < size:
			# Sub-parsers keep partial lines, so a chunk is never fed twice
			value, read = self.parser.feed(chunk, offset)
			offset += read
			if value is None:
				continue
			elif self.parser is self.message:
				self.requestLine = self.message.flush()
				self.requestHeaders = None
				if self.requestLine:
					yield self.requestLine
					self.parser = self.headers.reset()
			elif self.parser is self.headers:
				if value is not False:
					continue
				self.requestHeaders = self.headers.flush()
				yield self.requestHeaders
				length: int = self.requestHeaders.contentLength or 0
				if (
					self.requestLine
					and self.requestLine.method in self.METHOD_HAS_BODY
					and length > 0
				):
					self.parser = self.bodyLength.reset(length)
					yield HTTPProcessingStatus.Body
				else:
					yield from self.complete()
			else:
				yield from self.complete(self.bodyLength.flush())


def parseQuery(text: str) -> dict[str, str]:
	"""Decodes a query string, a key without `=` having an empty value."""
	res: dict[str, str] = {}
	for item in text.split("&"):
		if item:
			key, _, value = item.partition("=")
			res[unquote_plus(key)] = unquote_plus(value)
	return res


# EOF
