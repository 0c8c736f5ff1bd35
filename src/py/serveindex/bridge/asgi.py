from pathlib import Path
from typing import Any, Awaitable, Callable, Coroutine
from urllib.parse import quote

from ..http.model import HTTPHeaders, HTTPRequest, HTTPRequestError, HTTPResponse
from ..service import ServeIndex
from ..utils import awaited
from ..utils.logging import debug, error, exception

# --
# ## ASGI Bridge
#
# Exposes the index as an ASGI middleware: requests the index declines are
# handed to the wrapped application, and errors go through `onError`.

# SEE: https://asgi.readthedocs.io/en/latest/specs/main.html

# Characters left as-is when encoding decoded paths
PATH_SAFE: str = "/!$&'()*+,;=:@~"

TScope = dict[str, Any]
TReceive = Callable[[], Awaitable[dict[str, Any]]]
TSend = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
TApplication = Callable[[TScope, TReceive, TSend], Awaitable[None]]
TErrorHandler = Callable[
	[HTTPRequest, HTTPRequestError], HTTPResponse | Awaitable[HTTPResponse]
]


def rawPath(scope: TScope) -> str:
	"""Returns the request path still percent-encoded, as the index does its
	own strict decoding."""
	raw: bytes | None = scope.get("raw_path")
	if raw:
		# Servers may include the query in the raw path
		return raw.split(b"?", 1)[0].decode("utf8", "surrogateescape")
	else:
		return quote(scope.get("path") or "/", safe=PATH_SAFE)


def asRequest(scope: TScope) -> HTTPRequest:
	headers: dict[str, str] = {}
	for name, value in scope.get("headers") or ():
		key = name.decode("latin1")
		value = value.decode("latin1")
		headers[key] = f"{headers[key]}, {value}" if key in headers else value
	# The mount prefix is decoded, it is encoded to compare with the raw path
	prefix: str = quote(scope.get("root_path") or "", safe=PATH_SAFE).rstrip("/")
	path: str = rawPath(scope)
	# Some servers include the mount prefix in the path, some don't
	if prefix and (path == prefix or path.startswith(f"{prefix}/")):
		path = path[len(prefix) :] or "/"
	return HTTPRequest(
		method=scope.get("method", "GET"),
		path=path,
		query=(scope.get("query_string") or b"").decode("latin1") or None,
		headers=HTTPHeaders.Make(headers),
		prefix=prefix,
		protocol=f"HTTP/{scope.get('http_version', '1.1')}",
	)


def onError(request: HTTPRequest, error: HTTPRequestError) -> HTTPResponse:
	"""The default error handler, a plain text response with the status reason."""
	return request.error(error.status)


async def notFound(scope: TScope, receive: TReceive, send: TSend) -> None:
	"""The application used when none is wrapped."""
	request = asRequest(scope)
	await writeResponse(request.notFound(), send, head=request.method == "HEAD")


async def writeResponse(
	response: HTTPResponse, send: TSend, *, head: bool = False
) -> None:
	await send(
		{
			"type": "http.response.start",
			"status": response.status,
			"headers": [
				(k.lower().encode("latin1"), v.encode("latin1"))
				for k, v in response.headers.headers.items()
			],
		}
	)
	# HEAD responses keep their `Content-Length` but have no body
	await send(
		{
			"type": "http.response.body",
			"body": b"" if head or response.body is None else response.body,
			"more_body": False,
		}
	)


class ServeIndexMiddleware:
	"""An ASGI middleware serving directory listings for `root`, delegating
	other requests to `app`."""

	def __init__(
		self,
		app: TApplication | None,
		root: str | Path,
		*,
		onError: TErrorHandler = onError,
		**options: Any,
	):
		self.app: TApplication = app or notFound
		self.index: ServeIndex = ServeIndex(root, **options)
		self.onError: TErrorHandler = onError

	async def __call__(self, scope: TScope, receive: TReceive, send: TSend) -> None:
		if scope["type"] == "http":
			await self.onHTTP(scope, receive, send)
		elif scope["type"] == "lifespan" and self.app is notFound:
			await self.onLifespan(scope, receive, send)
		else:
			await self.app(scope, receive, send)

	async def onHTTP(self, scope: TScope, receive: TReceive, send: TSend) -> None:
		request = asRequest(scope)
		response: HTTPResponse | None
		try:
			response = await self.index.process(request)
		except HTTPRequestError as e:
			response = await self.fail(request, e)
		except Exception as e:
			exception(e, "Unexpected error while serving the index")
			response = await self.fail(request, HTTPRequestError(str(e), 500))
		if response is None:
			await self.app(scope, receive, send)
		else:
			await writeResponse(response, send, head=request.method == "HEAD")

	async def fail(self, request: HTTPRequest, e: HTTPRequestError) -> HTTPResponse:
		if e.status >= 500:
			error(e.message, e.status, Path=request.originalPath)
		else:
			debug(e.message, Status=e.status, Path=request.originalPath)
		return await awaited(self.onError(request, e))

	async def onLifespan(self, scope: TScope, receive: TReceive, send: TSend) -> None:
		# SEE: https://asgi.readthedocs.io/en/latest/specs/lifespan.html
		while True:
			message = await receive()
			if message["type"] == "lifespan.startup":
				await send({"type": "lifespan.startup.complete"})
			elif message["type"] == "lifespan.shutdown":
				await send({"type": "lifespan.shutdown.complete"})
				return None


def asgi(
	root: str | Path, app: TApplication | None = None, **options: Any
) -> ServeIndexMiddleware:
	"""Creates the ASGI application serving listings for `root`."""
	return ServeIndexMiddleware(app, root, **options)


# EOF
