import re
from typing import Iterable, NamedTuple, Pattern

from ..utils import unquote

# --
# == Content negotiation
#
# Implements `Accept` header matching with quality values, as described in
# RFC 9110 §12.5.1. Only media types are negotiated.

# The representations the index can produce, in server preference order.
MEDIA_TYPES: tuple[str, ...] = ("text/html", "text/plain", "application/json")

RE_MEDIA_RANGE: Pattern[str] = re.compile(r"^\s*([^\s/;]+)/([^;\s]+)\s*(?:;(.*))?$")


class MediaRange(NamedTuple):
	"""A media range from an `Accept` header, `index` is its position in the
	header."""

	type: str
	subtype: str
	params: dict[str, str]
	q: float = 1.0
	index: int = 0

	@staticmethod
	def Parse(text: str, index: int = 0) -> "MediaRange | None":
		"""Parses `type/subtype;param=value;q=0.5`, parameters after `q` are
		accept extensions and are ignored."""
		match = RE_MEDIA_RANGE.match(text)
		if not match:
			return None
		params: dict[str, str] = {}
		q: float = 1.0
		for param in splitParameters(match.group(3) or ""):
			key, _, value = param.partition("=")
			key = key.strip().lower()
			value = unquote(value.strip())
			if not key:
				continue
			elif key == "q":
				try:
					q = float(value)
				except ValueError:
					q = 0.0
				break
			else:
				params[key] = value
		return MediaRange(
			type=match.group(1).lower(),
			subtype=match.group(2).lower(),
			params=params,
			q=q,
			index=index,
		)

	def specificity(self, mediaType: "MediaRange") -> int | None:
		"""Returns how specifically this range matches the given media type
		(exact type 4, exact subtype 2, parameters 1), or `None` when it does
		not match at all."""
		s: int = 0
		if self.type == mediaType.type:
			s |= 4
		elif self.type != "*":
			return None
		if self.subtype == mediaType.subtype:
			s |= 2
		elif self.subtype != "*":
			return None
		if self.params:
			if all(
				v == "*" or v.lower() == mediaType.params.get(k, "").lower()
				for k, v in self.params.items()
			):
				s |= 1
			else:
				return None
		return s


class Priority(NamedTuple):
	q: float
	specificity: int
	order: int
	index: int
	type: str


def splitParameters(text: str, separator: str = ";") -> list[str]:
	"""Splits on the separator, ignoring separators within quoted strings."""
	res: list[str] = []
	start: int = 0
	quoted: bool = False
	for i, c in enumerate(text):
		if c == '"':
			quoted = not quoted
		elif c == separator and not quoted:
			res.append(text[start:i])
			start = i + 1
	res.append(text[start:])
	return [_ for _ in res if _.strip()]


def parseAccept(header: str) -> list[MediaRange]:
	"""Parses the `Accept` header into a list of media ranges, dropping the
	malformed ones."""
	res: list[MediaRange] = []
	for i, chunk in enumerate(splitParameters(header, ",")):
		if (media := MediaRange.Parse(chunk, i)) is not None:
			res.append(media)
	return res


def priority(mediaType: str, index: int, accepted: list[MediaRange]) -> Priority:
	"""Finds the best match for `mediaType` among the accepted ranges, preferring
	specificity, then quality, then position in the header."""
	target = MediaRange.Parse(mediaType)
	best: Priority = Priority(0.0, 0, -1, index, mediaType)
	if target is None:
		return best
	for media_range in accepted:
		s = media_range.specificity(target)
		if s is None:
			continue
		if best.order == -1 or (s, media_range.q, -media_range.index) > (
			best.specificity,
			best.q,
			-best.order,
		):
			best = Priority(media_range.q, s, media_range.index, index, mediaType)
	return best


def preferred(header: str | None, available: Iterable[str] = MEDIA_TYPES) -> list[str]:
	"""Returns the available media types acceptable to the client, most preferred
	first."""
	accepted = parseAccept(header if header is not None else "*/*")
	priorities = [
		p
		for p in (priority(t, i, accepted) for i, t in enumerate(available))
		if p.q > 0
	]
	priorities.sort(key=lambda _: (-_.q, -_.specificity, _.order, _.index))
	return [_.type for _ in priorities]


def negotiate(header: str | None, available: Iterable[str] = MEDIA_TYPES) -> str | None:
	"""Selects the media type to respond with. A missing or empty `Accept`
	header selects the first available type, `None` means that nothing is
	acceptable."""
	types = list(available)
	if not header or not header.strip():
		return types[0] if types else None
	res = preferred(header, types)
	return res[0] if res else None


# EOF
