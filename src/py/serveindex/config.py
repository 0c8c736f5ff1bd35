import os
from os import getenv
from pathlib import Path
from typing import Any, Awaitable, Callable, NamedTuple, TypeAlias
from .utils.io import DEFAULT_ENCODING  # NOQA: F401

PORT: int = int(getenv("PORT", 8000))

# The CLI is a local tool, it only listens on the loopback unless told otherwise
HOST: str = getenv("HOST", "127.0.0.1")

# The layout of the HTML listing, `tiles` or `details`
VIEW: str = getenv("SERVEINDEX_VIEW", "tiles")

# Maximum number of concurrent `stat` calls when listing a directory
STAT_CONCURRENCY: int = int(getenv("SERVEINDEX_STAT_CONCURRENCY", 10))

LOG_LEVEL: str = getenv("SERVEINDEX_LOG_LEVEL", "info")

PUBLIC: Path = Path(__file__).parent / "public"
DEFAULT_TEMPLATE: Path = PUBLIC / "directory.html"
DEFAULT_STYLESHEET: Path = PUBLIC / "style.css"
ICONS: Path = PUBLIC / "icons"

# A render strategy takes the listing locals and returns the HTML body,
# either directly or as an awaitable.
TRender: TypeAlias = Callable[[Any], str | Awaitable[str]]
TFilter: TypeAlias = Callable[[str], bool]


def withSep(path: str) -> str:
	"""Appends the platform separator unless the path already ends with it."""
	return path if path.endswith(os.sep) else path + os.sep


class IndexOptions(NamedTuple):
	"""The configuration of an index middleware, shared read-only by all
	requests."""

	root: str
	filter: TFilter | None = None
	hidden: bool = True
	icons: bool = False
	stylesheet: Path = DEFAULT_STYLESHEET
	template: Path | TRender = DEFAULT_TEMPLATE
	view: str = VIEW
	concurrency: int = STAT_CONCURRENCY

	@staticmethod
	def Make(
		root: str | Path | None,
		*,
		filter: TFilter | None = None,
		hidden: bool | None = None,
		icons: bool | None = None,
		stylesheet: str | Path | None = None,
		template: str | Path | TRender | None = None,
		view: str | None = None,
		concurrency: int | None = None,
	) -> "IndexOptions":
		if not root:
			raise TypeError("IndexOptions.Make() root path required")
		return IndexOptions(
			# The root is absolute, normalized and ends with a separator so
			# that prefix checks can't match a partial segment.
			root=withSep(os.path.normpath(os.path.abspath(root))),
			filter=filter,
			hidden=True if hidden is None else bool(hidden),
			icons=bool(icons),
			stylesheet=Path(stylesheet) if stylesheet else DEFAULT_STYLESHEET,
			template=(
				template
				if callable(template)
				else Path(template)
				if template
				else DEFAULT_TEMPLATE
			),
			view=view or VIEW,
			concurrency=STAT_CONCURRENCY if concurrency is None else max(1, concurrency),
		)


# EOF
