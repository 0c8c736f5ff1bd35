import asyncio
from pathlib import Path
from typing import Any, Callable

import pytest

from serveindex.http.model import HTTPRequest


@pytest.fixture
def tree(tmp_path: Path) -> Path:
	"""A directory with a few files, a dotfile and a subdirectory."""
	root = tmp_path / "www"
	root.mkdir()
	(root / "a.txt").write_text("abc")
	(root / "b.json").write_text("{}")
	(root / ".hidden").write_text("")
	(root / "movie.mp4").write_bytes(b"\0" * 16)
	(root / "sub").mkdir()
	(root / "sub" / "inner.txt").write_text("inner")
	return root


@pytest.fixture
def run() -> Callable[[Any], Any]:
	return asyncio.run


@pytest.fixture
def request_for() -> Callable[..., HTTPRequest]:
	def factory(
		path: str = "/",
		method: str = "GET",
		accept: str | None = None,
		prefix: str = "",
	) -> HTTPRequest:
		return HTTPRequest(
			method,
			path,
			headers={"Accept": accept} if accept is not None else {},
			prefix=prefix,
		)

	return factory


# EOF
