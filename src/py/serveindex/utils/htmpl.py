from typing import (
	LiteralString,
	Optional,
	Iterable,
	Iterator,
	Union,
	Callable,
	cast,
)
from mypy_extensions import KwArg, VarArg

# --
# HTMPL defines functions to create HTML fragments. Text children and
# attribute values are always escaped, there is no way to inject raw markup.

HTML_EMPTY: list[LiteralString] = (
	"area base br col embed hr img input link meta param source track wbr".split()
)
HTML_ESCAPED = str.maketrans(
	{"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#39;"}
)


def escape(text: str | int | float | None) -> str:
	return "" if text is None else str(text).translate(HTML_ESCAPED)


TNodeContent = Union["Node", str, int, float, None]
TAttributeContent = str | int | float | None


class Node:
	__slots__ = ["name", "attributes", "children"]

	def __init__(
		self,
		name: str,
		children: Optional[Iterable[TNodeContent]] = None,
		attributes: Optional[dict[str, TAttributeContent]] = None,
	):
		self.name = name
		self.attributes: dict[str, TAttributeContent] = attributes or {}
		self.children: list[TNodeContent] = [_ for _ in children] if children else []

	def iterHTML(self) -> Iterator[str]:
		if self.name == "#text":
			yield escape(self.attributes.get("#value"))
		else:
			yield f"<{self.name}"
			for k, v in self.attributes.items():
				# A `None` value yields a boolean attribute like `controls`
				yield f' {k}="{escape(v)}"' if v is not None else f" {k}"
			if not self.children:
				yield ">" if self.name in HTML_EMPTY else f"></{self.name}>"
			else:
				yield ">"
				for _ in self.children:
					if isinstance(_, Node):
						yield from _.iterHTML()
					elif _ is None:
						pass
					else:
						yield escape(_)
				yield f"</{self.name}>"

	def __str__(self) -> str:
		return "".join(self.iterHTML())


def text(value: str | int | float) -> Node:
	return Node("#text", attributes={"#value": value})


def node(
	name: str,
	children: Optional[Iterable[TNodeContent]] = None,
	attributes: Optional[dict[str, TAttributeContent]] = None,
) -> Node:
	return Node(
		name,
		children=[text(_) if isinstance(_, str) else _ for _ in children or ()],
		attributes=attributes,
	)


NodeFactory = Callable[
	[
		VarArg(TNodeContent | list[TNodeContent] | tuple[TNodeContent, ...]),
		KwArg(TAttributeContent),
	],
	Node,
]


def nodeFactory(name: str) -> NodeFactory:
	def f(*children: TNodeContent, **attributes: TAttributeContent) -> Node:
		content: list[TNodeContent] = []
		for _ in children:
			if isinstance(_, (list, tuple)):
				content += list(_)
			else:
				content.append(_)
		attrs: dict[str, TAttributeContent] = {}
		for k, v in attributes.items():
			# `_` stands for `class`, trailing underscores and inner
			# underscores map to `data_setup` -> `data-setup`.
			if k == "_":
				attrs["class"] = v
			else:
				attrs[k.rstrip("_").replace("_", "-")] = v
		return node(name, content, attrs)

	f.__name__ = name
	return cast(NodeFactory, f)


HTML_TAGS: list[LiteralString] = (
	"""\
a div li source span ul video\
""".split()
)


class Markup:
	__slots__ = ["_factories", "_name"]

	def __init__(self, name: str, factories: dict[str, NodeFactory]):
		self._name: str = name
		self._factories: dict[str, NodeFactory] = factories

	def __getattribute__(self, name: str) -> NodeFactory:
		if name.startswith("_"):
			return cast(NodeFactory, super().__getattribute__(name))
		else:
			factories = self._factories
			if name not in factories:
				raise KeyError(
					f"No tag {name}, pick one of {','.join(factories.keys())}"
				)
			else:
				return factories[name]


def markup(name: str, tags: list[str | LiteralString]) -> Markup:
	return Markup(name, {_: nodeFactory(_) for _ in tags})


H: Markup = markup("html", list(HTML_TAGS))


def html(*nodes: Node, separator: str = "") -> str:
	"""Serializes the nodes, joined by the given separator."""
	return separator.join("".join(_.iterHTML()) for _ in nodes)


# EOF
