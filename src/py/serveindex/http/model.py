from functools import lru_cache
from typing import Any, NamedTuple

from ..utils.io import DEFAULT_ENCODING
from .api import ResponseFactory
from .status import HTTP_STATUS

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


@lru_cache(maxsize=256)
def headername(name: str) -> str:
	"""Normalizes the header name as `Kebab-Case`. The cache is bounded as
	names come from requests."""
	return "-".join(_.capitalize() for _ in name.split("-"))


# -----------------------------------------------------------------------------
#
# DATA MODEL
#
# -----------------------------------------------------------------------------


class HTTPHeaders(NamedTuple):
	"""Wraps HTTP headers, keyed by their normalized names."""

	headers: dict[str, str]

	@staticmethod
	def Make(headers: dict[str, str] | None = None) -> "HTTPHeaders":
		"""Creates headers with normalized names."""
		return HTTPHeaders({headername(k): v for k, v in (headers or {}).items()})


# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class HTTPRequestError(Exception):
	"""Raised by handlers to abort the request with the given status, 500 by
	default."""

	def __init__(
		self,
		message: str | None = None,
		status: int | None = None,
	):
		self.status: int = status or 500
		self.message: str = message or HTTP_STATUS.get(self.status, "Server Error")
		super().__init__(self.message)

	def __repr__(self) -> str:
		return f"HTTPRequestError({self.status}, {self.message!r})"


# -----------------------------------------------------------------------------
#
# REQUESTS
#
# -----------------------------------------------------------------------------


class HTTPRequest(ResponseFactory["HTTPResponse"]):
	"""Represents an HTTP request, which also acts as a factory for
	responses. The `path` is kept percent-encoded, as received, and is
	relative to the `prefix` the handler is mounted on."""

	__slots__ = ["protocol", "method", "path", "prefix", "query", "_headers"]

	def __init__(
		self,
		method: str,
		path: str,
		query: str | None = None,
		headers: HTTPHeaders | dict[str, str] | None = None,
		*,
		prefix: str = "",
		protocol: str = "HTTP/1.1",
	):
		super().__init__()
		self.method: str = method.upper()
		self.path: str = path
		self.prefix: str = prefix
		self.query: str | None = query
		self.protocol: str = protocol
		self._headers: HTTPHeaders = (
			headers if isinstance(headers, HTTPHeaders) else HTTPHeaders.Make(headers)
		)

	@property
	def headers(self) -> dict[str, str]:
		return self._headers.headers

	@property
	def originalPath(self) -> str:
		"""The path including the mount prefix."""
		return f"{self.prefix.rstrip('/')}{self.path}" if self.prefix else self.path

	def header(self, name: str) -> str | None:
		return self._headers.headers.get(headername(name))

	def respond(
		self,
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> "HTTPResponse":
		return HTTPResponse.Create(
			status=status,
			message=message,
			content=content,
			contentType=contentType,
			contentLength=contentLength,
			protocol=self.protocol,
			headers=headers,
		)


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class HTTPResponse:
	"""An HTTP response with a fully loaded body."""

	__slots__ = ["protocol", "status", "message", "headers", "body"]

	@staticmethod
	def Create(
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		headers: dict[str, str] | None = None,
		status: int = 200,
		message: str | None = None,
		protocol: str = "HTTP/1.1",
	) -> "HTTPResponse":
		"""Factory method to create HTTP response objects."""
		payload: bytes | None = None
		if content is None:
			pass
		elif isinstance(content, str):
			payload = content.encode(DEFAULT_ENCODING)
		elif isinstance(content, bytes):
			payload = content
		else:
			raise ValueError(f"Unsupported content {type(content)}:{content}")
		if payload is not None:
			contentLength = len(payload)
		updated_headers: dict[str, str] = {
			headername(k): v for k, v in (headers or {}).items()
		}
		if contentType is not None:
			updated_headers["Content-Type"] = contentType
		if contentLength is not None:
			updated_headers["Content-Length"] = str(contentLength)
		return HTTPResponse(
			status=status,
			message=message or HTTP_STATUS.get(status, "Unknown status"),
			headers=HTTPHeaders(updated_headers),
			body=payload,
			protocol=protocol,
		)

	def __init__(
		self,
		protocol: str,
		status: int,
		message: str | None,
		headers: HTTPHeaders,
		body: bytes | None = None,
	):
		self.protocol: str = protocol
		self.status: int = status
		self.message: str | None = message
		self.headers: HTTPHeaders = headers
		self.body: bytes | None = body

	def getHeader(self, name: str) -> str | None:
		return self.headers.headers.get(headername(name))

	def setHeader(self, name: str, value: str | int | None) -> "HTTPResponse":
		if value is None:
			self.headers.headers.pop(headername(name), None)
		else:
			self.headers.headers[headername(name)] = str(value)
		return self

	def setHeaders(self, headers: dict[str, str | int | None]) -> "HTTPResponse":
		for k, v in headers.items():
			self.setHeader(k, v)
		return self


# EOF
