import asyncio
import errno
import os
import stat as statmodule
from typing import Callable, NamedTuple

from .config import STAT_CONCURRENCY, TFilter
from .http.model import HTTPRequestError
from .utils.logging import debug

TStat = Callable[[str], os.stat_result]

# -----------------------------------------------------------------------------
#
# ENTRIES
#
# -----------------------------------------------------------------------------


class IndexEntry(NamedTuple):
	"""A directory entry, `stat` is `None` when the entry vanished between
	listing and stat."""

	name: str
	stat: os.stat_result | None = None

	@property
	def isDirectory(self) -> bool:
		return bool(self.stat and statmodule.S_ISDIR(self.stat.st_mode))

	@property
	def size(self) -> int | None:
		return self.stat.st_size if self.stat and not self.isDirectory else None

	@property
	def modified(self) -> float | None:
		return self.stat.st_mtime if self.stat else None


# -----------------------------------------------------------------------------
#
# FILESYSTEM
#
# -----------------------------------------------------------------------------


async def statTarget(path: str) -> os.stat_result | None:
	"""Returns the stat of the directory at `path`, or `None` when there is
	nothing to list there (missing, or not a directory) and the request should
	be handed over."""
	debug("stat", Path=path)
	try:
		res = await asyncio.to_thread(os.stat, path)
	except FileNotFoundError:
		return None
	except OSError as e:
		raise HTTPRequestError(
			f"Could not stat path: {e}",
			414 if e.errno == errno.ENAMETOOLONG else 500,
		) from e
	return res if statmodule.S_ISDIR(res.st_mode) else None


async def listDirectory(
	path: str, *, hidden: bool = True, filter: TFilter | None = None
) -> list[str]:
	"""Lists the names in the directory, sorted. Dotfiles are left out unless
	`hidden` is set, and `filter` is applied when given."""
	debug("readdir", Path=path)
	try:
		files: list[str] = await asyncio.to_thread(os.listdir, path)
	except OSError as e:
		raise HTTPRequestError(f"Could not list directory: {e}", 500) from e
	if not hidden:
		files = [_ for _ in files if not _.startswith(".")]
	if filter:
		files = [_ for _ in files if filter(_)]
	return sorted(files)


async def statEntries(
	directory: str,
	names: list[str],
	*,
	concurrency: int = STAT_CONCURRENCY,
	stat: TStat = os.stat,
) -> list[os.stat_result | None]:
	"""Stats all the names in `directory`, with at most `concurrency` calls in
	flight. The result is in the same order as `names`."""
	res: list[os.stat_result | None] = [None] * len(names)
	limit = asyncio.Semaphore(concurrency)

	async def statEntry(i: int, name: str) -> None:
		async with limit:
			try:
				res[i] = await asyncio.to_thread(stat, os.path.join(directory, name))
			except FileNotFoundError:
				res[i] = None
			except OSError as e:
				raise HTTPRequestError(f"Could not stat entry: {e}", 500) from e

	try:
		async with asyncio.TaskGroup() as group:
			for i, name in enumerate(names):
				group.create_task(statEntry(i, name))
	except* HTTPRequestError as errors:
		# The first failure cancels the others, it is the one we report
		first = errors.exceptions[0]
		raise first from first.__cause__
	return res


async def listEntries(
	directory: str,
	names: list[str],
	showUp: bool = False,
	*,
	concurrency: int = STAT_CONCURRENCY,
	stat: TStat = os.stat,
) -> list[IndexEntry]:
	"""Combines the names with their stats, prepending the parent entry when
	`showUp` is set."""
	files = [".."] + names if showUp else list(names)
	stats = await statEntries(directory, files, concurrency=concurrency, stat=stat)
	return [IndexEntry(name, stats[i]) for i, name in enumerate(files)]


# EOF
