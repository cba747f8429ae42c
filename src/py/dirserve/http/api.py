from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from ..utils.json import json
from .status import HTTP_STATUS

T = TypeVar("T")

# -----------------------------------------------------------------------------
#
# RESPONSE FACTORY
#
# -----------------------------------------------------------------------------

# --
# Requests create their own responses, which keeps handlers independent from
# the response model: they only ever call the shortcuts below.


class ResponseFactory(ABC, Generic[T]):
	@abstractmethod
	def respond(
		self,
		content: str | bytes | None = None,
		contentType: str | None = None,
		*,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> T: ...

	def error(
		self,
		status: int,
		content: str | None = None,
		*,
		contentType: str = "text/plain",
	) -> T:
		"""Responds with the given error status, the body being the reason
		phrase unless some content is given."""
		reason: str = HTTP_STATUS.get(status, "Server Error")
		return self.respond(
			reason if content is None else content,
			contentType,
			status=status,
			message=reason,
		)

	def notFound(self) -> T:
		# The body stays empty, so that nothing is told about the filesystem
		return self.error(404, "")

	def fail(self, content: str | None = None, *, status: int = 500) -> T:
		return self.error(status, content)

	def returns(self, value: Any, *, status: int = 200) -> T:
		"""Responds with the JSON serialization of the value."""
		return self.respond(json(value), "application/json", status=status)

	def respondHTML(self, html: str, *, status: int = 200) -> T:
		return self.respond(html, "text/html; charset=utf-8", status=status)


# EOF
