import asyncio
import json
import os

import pytest

import serveindex.service
from serveindex import IndexLocals, ServeIndex, serveIndex
from serveindex.http.model import HTTPRequestError

HTML = "text/html"
PLAIN = "text/plain"
JSON = "application/json"


def names(response) -> list[str]:
	return json.loads(response.body)


def test_options_and_methods(tree, run, request_for):
	index = serveIndex(tree)
	res = run(index.process(request_for("/", "OPTIONS")))
	assert res.status == 200
	assert res.getHeader("Allow") == "GET, HEAD, OPTIONS"
	assert res.getHeader("Content-Length") == "0"
	assert not res.body
	res = run(index.process(request_for("/", "POST")))
	assert res.status == 405
	assert res.getHeader("Allow") == "GET, HEAD, OPTIONS"


def test_json(tree, run, request_for):
	res = run(serveIndex(tree).process(request_for("/", accept=JSON)))
	assert res.status == 200
	assert res.getHeader("Content-Type") == "application/json; charset=utf-8"
	assert res.getHeader("X-Content-Type-Options") == "nosniff"
	assert names(res) == [".hidden", "a.txt", "b.json", "movie.mp4", "sub"]


def test_plain(tree, run, request_for):
	res = run(serveIndex(tree).process(request_for("/sub/", accept=PLAIN)))
	assert res.getHeader("Content-Type") == "text/plain; charset=utf-8"
	assert res.body == b"inner.txt\n"
	assert res.getHeader("Content-Length") == str(len(res.body))


def test_not_acceptable(tree, run, request_for):
	with pytest.raises(HTTPRequestError) as error:
		run(serveIndex(tree).process(request_for("/", accept="image/png")))
	assert error.value.status == 406


def test_html(tree, run, request_for):
	res = run(serveIndex(tree).process(request_for("/")))
	body = res.body.decode("utf8")
	assert res.getHeader("Content-Type") == "text/html; charset=utf-8"
	assert "<title>listing directory /</title>" in body
	assert 'href="/a.txt"' in body
	assert 'title=".."' not in body


def test_html_subdirectory(tree, run, request_for):
	res = run(serveIndex(tree).process(request_for("/sub/", accept=HTML)))
	body = res.body.decode("utf8")
	assert body.index('title=".."') < body.index('title="inner.txt"')
	assert 'href="/sub/inner.txt"' in body
	assert '<a href="/sub">sub</a>' in body


def test_listing_excludes_parent_outside_html(tree, run, request_for):
	res = run(serveIndex(tree).process(request_for("/sub/", accept=JSON)))
	assert names(res) == ["inner.txt"]


def test_pass_through(tree, run, request_for):
	index = serveIndex(tree)
	assert run(index.process(request_for("/missing/"))) is None
	assert run(index.process(request_for("/a.txt"))) is None
	assert run(index.process(request_for("/a.txt", "HEAD"))) is None


def test_forbidden(tree, run, request_for):
	with pytest.raises(HTTPRequestError) as error:
		run(serveIndex(tree / "sub").process(request_for("/../a.txt")))
	assert error.value.status == 403
	with pytest.raises(HTTPRequestError) as error:
		run(serveIndex(tree / "sub").process(request_for("/%2e%2e/")))
	assert error.value.status == 403


def test_null_byte_before_filesystem(tree, run, request_for, monkeypatch):
	calls: list[str] = []

	async def statTarget(path: str):
		calls.append(path)
		return None

	monkeypatch.setattr(serveindex.service, "statTarget", statTarget)
	with pytest.raises(HTTPRequestError) as error:
		run(serveIndex(tree).process(request_for("/a%00b/")))
	assert error.value.status == 400
	assert calls == []


def test_hidden_and_filter(tree, run, request_for):
	res = run(
		serveIndex(tree, hidden=False).process(request_for("/", accept=JSON))
	)
	assert ".hidden" not in names(res)
	res = run(
		serveIndex(tree, filter=lambda _: "." in _).process(
			request_for("/", accept=JSON)
		)
	)
	assert names(res) == [".hidden", "a.txt", "b.json", "movie.mp4"]


def test_custom_template(tree, run, request_for):
	seen: list[IndexLocals] = []

	def render(locals: IndexLocals) -> str:
		seen.append(locals)
		return f"<p>{len(locals.fileList)}</p>"

	index = serveIndex(tree, template=render, view="details", icons=True)
	res = run(index.process(request_for("/sub/")))
	assert res.body == b"<p>2</p>"
	(locals,) = seen
	assert locals.directory == "/sub/"
	assert locals.displayIcons is True
	assert locals.viewName == "details"
	assert locals.path == str(tree / "sub")
	assert [_.name for _ in locals.fileList] == ["..", "inner.txt"]
	assert locals.fileList[1].size == 5
	assert "#files" in locals.style


def test_async_template(tree, run, request_for):
	async def render(locals: IndexLocals) -> str:
		await asyncio.sleep(0)
		return "async"

	res = run(serveIndex(tree, template=render).process(request_for("/")))
	assert res.body == b"async"


def test_template_errors(tree, run, request_for):
	def render(locals: IndexLocals) -> str:
		raise HTTPRequestError("Nope", 418)

	with pytest.raises(HTTPRequestError) as error:
		run(serveIndex(tree, template=render).process(request_for("/")))
	assert error.value.status == 418
	with pytest.raises(HTTPRequestError) as error:
		run(
			serveIndex(tree, template=tree / "missing.html").process(
				request_for("/")
			)
		)
	assert error.value.status == 500


def test_missing_stylesheet(tree, run, request_for):
	index = serveIndex(tree, stylesheet=tree / "missing.css")
	with pytest.raises(HTTPRequestError) as error:
		run(index.process(request_for("/")))
	assert error.value.status == 500
	# Other representations don't need the stylesheet
	assert run(index.process(request_for("/", accept=JSON))).status == 200


def test_encoded_names(tree, run, request_for):
	(tree / "sub" / "café & <b>.txt").write_text("")
	index = serveIndex(tree)
	res = run(index.process(request_for("/sub/", accept=JSON)))
	assert "café & <b>.txt" in names(res)
	body = run(index.process(request_for("/sub/"))).body.decode("utf8")
	assert "café &amp; &lt;b&gt;.txt" in body
	assert 'href="/sub/caf%C3%A9%20%26%20%3Cb%3E.txt"' in body


def test_undecodable_names(tree, run, request_for):
	try:
		os.mkdir(os.path.join(os.fsencode(tree), b"bad\xffname"))
	except OSError:
		pytest.skip("The filesystem only accepts UTF-8 names")
	index = serveIndex(tree)
	res = run(index.process(request_for("/", accept=JSON)))
	assert "bad\ufffdname" in names(res)
	res = run(index.process(request_for("/", accept=PLAIN)))
	assert b"bad\xef\xbf\xbdname\n" in res.body
	body = run(index.process(request_for("/"))).body.decode("utf8")
	assert '<span class="name">bad\ufffdname</span>' in body
	# Links keep the bytes on disk
	assert 'href="/bad%FFname"' in body


def test_json_and_html_list_the_same_names(tree, run, request_for):
	seen: list[IndexLocals] = []

	def render(locals: IndexLocals) -> str:
		seen.append(locals)
		return ""

	index = serveIndex(tree, template=render)
	for path in ("/", "/sub/"):
		res = run(index.process(request_for(path, accept=JSON)))
		run(index.process(request_for(path, accept=HTML)))
		listed = [_.name for _ in seen[-1].fileList if _.name != ".."]
		assert names(res) == listed
	assert len(seen) == 2


def test_prefix(tree, run, request_for):
	index = serveIndex(tree)
	res = run(index.process(request_for("/sub/", prefix="/files")))
	body = res.body.decode("utf8")
	assert "<title>listing directory /files/sub/</title>" in body
	assert 'href="/files/sub/inner.txt"' in body


def test_icons(tree, run, request_for):
	index = serveIndex(tree, icons=True)
	body = run(index.process(request_for("/"))).body.decode("utf8")
	assert 'class="icon icon-directory"' in body
	assert "data:image/svg+xml;base64," in body
	assert "directory" in index.icons.icons


def test_options():
	with pytest.raises(TypeError):
		ServeIndex("")
	index = ServeIndex(".", concurrency=0)
	assert index.options.concurrency == 1
	assert index.root.endswith("/")


# EOF
