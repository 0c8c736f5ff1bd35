from typing import Any
import json as basejson


def json(value: Any) -> bytes:
	"""Converts the value to compact, UTF-8 encoded JSON."""
	return basejson.dumps(value, ensure_ascii=False, separators=(",", ":")).encode(
		"utf8"
	)


# EOF
