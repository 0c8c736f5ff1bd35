from inspect import isawaitable
from typing import Any


async def awaited(value: Any) -> Any:
	"""Awaits the value when it is awaitable, returns it as-is otherwise."""
	if isawaitable(value):
		return await value
	else:
		return value


def unquote(text: str) -> str:
	"""Strips a matching pair of surrounding quotes."""
	text = text.strip() if text else text
	if not text:
		return text
	if len(text) > 1 and text[0] == text[-1] and text[0] in "\"'":
		return text[1:-1]
	else:
		return text


# EOF
