DEFAULT_ENCODING: str = "utf8"
CRLF: bytes = b"\r\n"


class LineParser:
	"""Accumulates chunks until a complete CRLF-terminated line is
	available. Only the bytes up to the end of the line are consumed, the
	caller feeds the rest of the chunk again."""

	__slots__ = ["buffer", "scanned"]

	def __init__(self) -> None:
		self.buffer: bytearray = bytearray()
		# Offset up to which the buffer is known not to hold a CRLF
		self.scanned: int = 0

	def reset(self) -> "LineParser":
		self.buffer.clear()
		self.scanned = 0
		return self

	def feed(self, chunk: bytes, start: int = 0) -> tuple[bytes | None, int]:
		"""Returns the line (without its CRLF) or `None`, and the number of
		bytes consumed from `chunk`, starting at `start`."""
		previous: int = len(self.buffer)
		self.buffer += chunk[start:]
		end: int = self.buffer.find(CRLF, self.scanned)
		if end == -1:
			# The CR may be at the very end, waiting for its LF
			self.scanned = max(0, len(self.buffer) - 1)
			return None, len(chunk) - start
		line: bytes = bytes(self.buffer[:end])
		self.reset()
		return line, end + len(CRLF) - previous


# EOF
