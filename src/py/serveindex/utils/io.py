import asyncio
from base64 import b64encode
from pathlib import Path

DEFAULT_ENCODING: str = "utf8"


async def readText(path: Path | str, encoding: str = DEFAULT_ENCODING) -> str:
	"""Reads the whole file as text in a worker thread."""
	return await asyncio.to_thread(Path(path).read_text, encoding)


async def readBase64(path: Path | str) -> str:
	"""Reads the whole file as base64-encoded ASCII in a worker thread."""
	data: bytes = await asyncio.to_thread(Path(path).read_bytes)
	return b64encode(data).decode("ascii")


# EOF
