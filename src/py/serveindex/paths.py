import os
import re
from typing import NamedTuple, Pattern
from urllib.parse import unquote_to_bytes

from .config import withSep
from .http.model import HTTPRequestError
from .utils.logging import debug

# --
# == Path resolution
#
# Maps a request path to an absolute filesystem path that is guaranteed to be
# within the configured root. This is purely lexical: nothing here touches the
# filesystem.

RE_BAD_ESCAPE: Pattern[str] = re.compile(r"%(?![0-9A-Fa-f]{2})")


class ResolvedPath(NamedTuple):
	path: str
	showUp: bool


def decodePath(path: str) -> str:
	"""Percent-decodes the path, rejecting malformed escapes and byte sequences
	that are not valid UTF-8."""
	if RE_BAD_ESCAPE.search(path):
		raise HTTPRequestError(f"Malformed escape in path: {path!r}", 400)
	try:
		# Raw request paths may carry undecodable bytes as surrogates
		return unquote_to_bytes(path.encode("utf8", "surrogateescape")).decode("utf8")
	except UnicodeError as e:
		raise HTTPRequestError(f"Path is not valid UTF-8: {path!r}", 400) from e


def rootPath(root: str) -> str:
	return withSep(os.path.normpath(os.path.abspath(root)))


def resolvePath(root: str, requestPath: str) -> ResolvedPath:
	"""Resolves the (percent-encoded) request path against the `root`, which
	must already be normalized by `rootPath`."""
	directory = decodePath(requestPath)
	path = os.path.normpath(os.path.join(root, directory.lstrip("/")))
	# Null bytes would be truncated by the OS
	if "\0" in path:
		raise HTTPRequestError("Null byte in path", 400)
	if not withSep(path).startswith(root):
		debug("Malicious path", Path=path)
		raise HTTPRequestError(f"Path is outside of root: {directory!r}", 403)
	return ResolvedPath(path, rootPath(path) != root)


# EOF
