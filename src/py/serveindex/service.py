from pathlib import Path
from typing import Any, ClassVar

from .config import IndexOptions, TRender
from .http.model import HTTPRequest, HTTPRequestError, HTTPResponse
from .http.negotiation import MEDIA_TYPES, negotiate
from .listing import listDirectory, listEntries, statTarget
from .paths import ResolvedPath, decodePath, resolvePath
from .render import (
	IconCache,
	IndexLocals,
	TemplateRenderer,
	renderJSON,
	renderPlain,
)
from .utils import awaited
from .utils.io import readText

# -----------------------------------------------------------------------------
#
# SERVE INDEX
#
# -----------------------------------------------------------------------------


class ServeIndex:
	"""Serves directory listings for the files under `root`.

	`process()` returns a response, or `None` when the request is not for a
	directory and should be handed over to the next handler. Failures are
	raised as `HTTPRequestError` with the status to respond with:

	- `400` for malformed paths or paths with null bytes,
	- `403` for paths outside of the root,
	- `406` when none of HTML, text or JSON is acceptable,
	- `414` when the path is too long for the filesystem,
	- `500` for any other filesystem error.

	The `template` option is either a path to an HTML template with
	`{style}`, `{files}`, `{directory}` and `{linked-path}` placeholders, or
	a render strategy: a callable taking the `IndexLocals` and returning the
	HTML body (or an awaitable of it).
	"""

	ALLOW: ClassVar[str] = "GET, HEAD, OPTIONS"
	RENDERERS: ClassVar[dict[str, str]] = {
		"text/html": "renderHTML",
		"text/plain": "renderPlain",
		"application/json": "renderJSON",
	}

	def __init__(self, root: str | Path, **options: Any):
		self.options: IndexOptions = IndexOptions.Make(root, **options)
		self.icons: IconCache = IconCache()
		template = self.options.template
		self.render: TRender = (
			TemplateRenderer(template, self.icons)
			if isinstance(template, Path)
			else template
		)

	@property
	def root(self) -> str:
		return self.options.root

	def resolvePath(self, path: str) -> ResolvedPath:
		return resolvePath(self.root, path)

	async def process(self, request: HTTPRequest) -> HTTPResponse | None:
		if request.method not in ("GET", "HEAD"):
			return request.empty(
				status=200 if request.method == "OPTIONS" else 405,
				headers={"Allow": self.ALLOW},
			)
		resolved = self.resolvePath(request.path)
		if not await statTarget(resolved.path):
			return None
		files = await listDirectory(
			resolved.path, hidden=self.options.hidden, filter=self.options.filter
		)
		media_type = negotiate(request.header("Accept"), MEDIA_TYPES)
		if not media_type:
			raise HTTPRequestError(
				f"None of {', '.join(MEDIA_TYPES)} is acceptable", 406
			)
		renderer = getattr(self, self.RENDERERS[media_type])
		response: HTTPResponse = await renderer(
			request, files, decodePath(request.originalPath), resolved
		)
		return self.secure(response)

	async def renderHTML(
		self,
		request: HTTPRequest,
		files: list[str],
		directory: str,
		resolved: ResolvedPath,
	) -> HTTPResponse:
		entries = await listEntries(
			resolved.path,
			files,
			resolved.showUp,
			concurrency=self.options.concurrency,
		)
		try:
			style = await readText(self.options.stylesheet)
		except OSError as e:
			raise HTTPRequestError(f"Could not read stylesheet: {e}", 500) from e
		locals = IndexLocals(
			directory=directory,
			displayIcons=self.options.icons,
			fileList=entries,
			path=resolved.path,
			style=style,
			viewName=self.options.view,
		)
		try:
			body: str = await awaited(self.render(locals))
		except OSError as e:
			raise HTTPRequestError(f"Could not render listing: {e}", 500) from e
		return request.respondHTML(body)

	async def renderPlain(
		self,
		request: HTTPRequest,
		files: list[str],
		directory: str,
		resolved: ResolvedPath,
	) -> HTTPResponse:
		return request.respondText(renderPlain(files))

	async def renderJSON(
		self,
		request: HTTPRequest,
		files: list[str],
		directory: str,
		resolved: ResolvedPath,
	) -> HTTPResponse:
		return request.respond(renderJSON(files), contentType="application/json")

	def secure(self, response: HTTPResponse) -> HTTPResponse:
		"""Declares the charset and disables content sniffing."""
		content_type = response.getHeader("Content-Type")
		return response.setHeaders(
			{
				"X-Content-Type-Options": "nosniff",
				"Content-Type": f"{content_type}; charset=utf-8"
				if content_type
				else None,
			}
		)

	def __repr__(self) -> str:
		return f"(ServeIndex {self.root!r} :view {self.options.view})"


def serveIndex(root: str | Path, **options: Any) -> ServeIndex:
	"""Creates the index middleware for the given root directory."""
	return ServeIndex(root, **options)


# EOF
