import os
import threading
import time

import pytest

from serveindex.http.model import HTTPRequestError
from serveindex.listing import (
	IndexEntry,
	listDirectory,
	listEntries,
	statEntries,
	statTarget,
)


def test_stat_target_directory(tree, run):
	res = run(statTarget(str(tree)))
	assert res is not None
	assert run(statTarget(str(tree / "sub"))) is not None


def test_stat_target_declines(tree, run):
	assert run(statTarget(str(tree / "missing"))) is None
	assert run(statTarget(str(tree / "a.txt"))) is None


def test_stat_target_name_too_long(tree, run):
	with pytest.raises(HTTPRequestError) as error:
		run(statTarget(str(tree / ("a" * 1024))))
	assert error.value.status == 414


def test_stat_target_other_error(tree, run):
	# A file used as a directory fails with ENOTDIR
	with pytest.raises(HTTPRequestError) as error:
		run(statTarget(str(tree / "a.txt" / "child")))
	assert error.value.status == 500
	assert isinstance(error.value.__cause__, OSError)


def test_list_directory_sorted(tree, run):
	assert run(listDirectory(str(tree))) == [
		".hidden",
		"a.txt",
		"b.json",
		"movie.mp4",
		"sub",
	]


def test_list_directory_hidden_and_filter(tree, run):
	assert ".hidden" not in run(listDirectory(str(tree), hidden=False))
	assert run(listDirectory(str(tree), filter=lambda _: _.endswith(".txt"))) == [
		"a.txt"
	]


def test_list_directory_failure(tree, run):
	with pytest.raises(HTTPRequestError) as error:
		run(listDirectory(str(tree / "missing")))
	assert error.value.status == 500


def test_stat_entries_preserve_order(tmp_path, run):
	names = [f"file-{i:02d}" for i in range(12)]
	for i, name in enumerate(names):
		(tmp_path / name).write_bytes(b"x" * i)

	def slowStat(path: str) -> os.stat_result:
		# The first entry completes last
		if path.endswith(names[0]):
			time.sleep(0.2)
		return os.stat(path)

	stats = run(statEntries(str(tmp_path), names, stat=slowStat))
	assert len(stats) == len(names)
	assert [_.st_size for _ in stats] == list(range(12))


def test_stat_entries_bounded_concurrency(tmp_path, run):
	names = [f"file-{i:02d}" for i in range(20)]
	for name in names:
		(tmp_path / name).write_text(name)
	lock = threading.Lock()
	counters = {"current": 0, "peak": 0}

	def countingStat(path: str) -> os.stat_result:
		with lock:
			counters["current"] += 1
			counters["peak"] = max(counters["peak"], counters["current"])
		try:
			time.sleep(0.02)
			return os.stat(path)
		finally:
			with lock:
				counters["current"] -= 1

	stats = run(statEntries(str(tmp_path), names, concurrency=3, stat=countingStat))
	assert all(_ is not None for _ in stats)
	assert 1 <= counters["peak"] <= 3


def test_stat_entries_vanished_entry(tree, run):
	stats = run(statEntries(str(tree), ["a.txt", "gone", "sub"]))
	assert stats[0] is not None and stats[0].st_size == 3
	assert stats[1] is None
	assert stats[2] is not None


def test_stat_entries_failure_aborts(tree, run):
	def failingStat(path: str) -> os.stat_result:
		if path.endswith("b.json"):
			raise PermissionError(13, "Permission denied", path)
		return os.stat(path)

	with pytest.raises(HTTPRequestError) as error:
		run(statEntries(str(tree), ["a.txt", "b.json", "sub"], stat=failingStat))
	assert error.value.status == 500
	assert isinstance(error.value.__cause__, PermissionError)


def test_list_entries_show_up(tree, run):
	entries = run(listEntries(str(tree / "sub"), ["inner.txt"], True))
	assert [_.name for _ in entries] == ["..", "inner.txt"]
	assert entries[0].isDirectory
	assert entries[1].size == 5
	entries = run(listEntries(str(tree), ["a.txt", "sub"], False))
	assert [_.name for _ in entries] == ["a.txt", "sub"]
	assert entries[1].isDirectory and entries[1].size is None


def test_index_entry_without_stat():
	entry = IndexEntry("gone")
	assert not entry.isDirectory
	assert entry.size is None
	assert entry.modified is None


# EOF
