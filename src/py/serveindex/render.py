import mimetypes
import os
import posixpath
import re
import time
from pathlib import Path
from typing import Iterable, NamedTuple, Pattern
from urllib.parse import quote

from .config import ICONS
from .listing import IndexEntry
from .utils.htmpl import H, Node, escape, html
from .utils.io import readBase64, readText
from .utils.json import json

mimetypes.init()

# Video types that browsers can play inline
PLAYABLE_VIDEO: set[str] = {"video/mp4", "video/webm", "video/ogg"}

ARCHIVE_EXTENSIONS: set[str] = {
	"7z",
	"bz2",
	"gz",
	"rar",
	"tar",
	"tgz",
	"xz",
	"zip",
}

RE_SLASHES: Pattern[str] = re.compile(r"/+")
RE_PLACEHOLDER: Pattern[str] = re.compile(r"\{(style|files|directory|linked-path)\}")


class IndexLocals(NamedTuple):
	"""What an HTML render strategy gets to produce the listing page."""

	directory: str
	displayIcons: bool
	fileList: list[IndexEntry]
	path: str
	style: str
	viewName: str


# -----------------------------------------------------------------------------
#
# PLAIN & JSON
#
# -----------------------------------------------------------------------------


def displayName(name: str) -> str:
	"""Returns the name as valid text, names that are not valid UTF-8 on disk
	get replacement characters."""
	return name.encode("utf8", "surrogateescape").decode("utf8", "replace")


def renderJSON(files: list[str]) -> bytes:
	return json([displayName(_) for _ in files])


def renderPlain(files: list[str]) -> bytes:
	return ("\n".join(displayName(_) for _ in files) + "\n").encode("utf8")


# -----------------------------------------------------------------------------
#
# HTML
#
# -----------------------------------------------------------------------------


def encodeURIComponent(text: str) -> str:
	"""Encodes everything but the unreserved URI characters and `!*'()`. Names
	are encoded from their bytes on disk."""
	return quote(os.fsencode(text), safe="!*'()")


def contentType(name: str) -> str | None:
	return mimetypes.guess_type(name, strict=False)[0]


def htmlPath(directory: str) -> str:
	"""Renders the breadcrumb for the directory, each segment linking to its
	cumulative path."""
	parts = directory.split("/")
	crumbs: list[str] = [""] * len(parts)
	for i, part in enumerate(parts):
		if part:
			parts[i] = encodeURIComponent(part)
			crumbs[i] = str(H.a(part, href="/".join(parts[: i + 1])))
	return " / ".join(crumbs)


def fileHref(directory: str, name: str) -> str:
	path = [encodeURIComponent(_) for _ in directory.split("/")]
	path.append(encodeURIComponent(name))
	return posixpath.normpath(RE_SLASHES.sub("/", "/".join(path)))


def fileDate(entry: IndexEntry) -> str:
	"""The modification time in the locale's date and time format."""
	if entry.modified is None or entry.name == "..":
		return ""
	else:
		return time.strftime("%x %X", time.localtime(entry.modified))


def iconLookup(entry: IndexEntry) -> str:
	"""Returns the icon kind for the entry, which is both the `icon-<kind>`
	class and the `<kind>.svg` asset name."""
	if entry.name == "..":
		return "up"
	elif entry.isDirectory:
		return "directory"
	ext = entry.name.rsplit(".", 1)[-1].lower() if "." in entry.name else ""
	if ext in ARCHIVE_EXTENSIONS:
		return "archive"
	content_type = contentType(entry.name) or ""
	kind, _, subtype = content_type.partition("/")
	if kind in ("image", "video", "audio", "text"):
		return kind
	elif subtype in ("json", "xml", "javascript"):
		return "text"
	else:
		return "default"


def htmlVideo(href: str, contentType: str) -> Node:
	return H.div(
		H.video(
			H.source(src=href, type=contentType),
			_="video-js vjs-default-skin",
			controls=None,
			preload="auto",
			data_setup='{"playbackRates": [0.5, 1, 1.5, 2], "aspectRatio": "16:9"}',
		),
		_="video-wrap",
	)


def htmlFile(entry: IndexEntry, directory: str, useIcons: bool) -> Node:
	href = fileHref(directory, entry.name)
	name = displayName(entry.name)
	classes: list[str] = ["icon", f"icon-{iconLookup(entry)}"] if useIcons else []
	content_type = None if entry.isDirectory else contentType(entry.name)
	return H.li(
		H.a(
			H.span(name, _="name"),
			H.span("" if entry.size is None else str(entry.size), _="size"),
			H.span(fileDate(entry), _="date"),
			href=href,
			_=" ".join(classes),
			title=name,
		),
		htmlVideo(href, content_type) if content_type in PLAYABLE_VIDEO else None,
	)


def htmlFileList(
	files: Iterable[IndexEntry], directory: str, useIcons: bool, view: str
) -> str:
	header: Node | None = (
		H.li(
			H.span("Name", _="name"),
			H.span("Size", _="size"),
			H.span("Modified", _="date"),
			_="header",
		)
		if view == "details"
		else None
	)
	return html(
		H.ul(
			header,
			*(htmlFile(_, directory, useIcons) for _ in files),
			id="files",
			_=f"view-{view}",
		)
	)


# -----------------------------------------------------------------------------
#
# ICONS
#
# -----------------------------------------------------------------------------


class IconCache:
	"""Memoizes the base64 content of the icon assets. Loading the same icon
	twice concurrently yields the same value, so no locking is needed."""

	def __init__(self, base: Path = ICONS):
		self.base: Path = base
		self.icons: dict[str, str] = {}

	async def load(self, icon: str) -> str:
		if icon not in self.icons:
			self.icons[icon] = await readBase64(self.base / f"{icon}.svg")
		return self.icons[icon]


async def iconStyle(
	files: Iterable[IndexEntry], useIcons: bool, icons: IconCache
) -> str:
	"""Returns the CSS rules that set the background of the icons used by the
	files."""
	if not useIcons:
		return ""
	rules: list[str] = []
	for kind in sorted({iconLookup(_) for _ in files}):
		data = await icons.load(kind)
		rules.append(
			f"#files .icon-{kind} .name {{background-image: url(data:image/svg+xml;base64,{data});}}"
		)
	return "\n" + "\n".join(rules)


class TemplateRenderer:
	"""The default render strategy, which fills the placeholders of an HTML
	template file. Substitution is done in a single pass, so that placeholders
	appearing in file names are never expanded."""

	def __init__(self, template: Path | str, icons: IconCache | None = None):
		self.template: Path = Path(template)
		self.icons: IconCache = icons if icons is not None else IconCache()

	async def __call__(self, locals: IndexLocals) -> str:
		source: str = await readText(self.template)
		values: dict[str, str] = {
			"style": locals.style
			+ await iconStyle(locals.fileList, locals.displayIcons, self.icons),
			"files": htmlFileList(
				locals.fileList, locals.directory, locals.displayIcons, locals.viewName
			),
			"directory": escape(locals.directory),
			"linked-path": htmlPath(locals.directory),
		}
		return RE_PLACEHOLDER.sub(lambda _: values[_.group(1)], source)


# EOF
