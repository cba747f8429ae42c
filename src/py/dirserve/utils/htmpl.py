from typing import (
    LiteralString,
    Iterable,
    Iterator,
    Union,
    Callable,
    cast,
)
from mypy_extensions import KwArg, VarArg

# --
# HTMPL builds HTML documents as trees of nodes, which are then serialized
# as a stream of strings. Text is always escaped, so that names coming from
# the filesystem can't inject markup.

# Elements that have no closing tag
HTML_VOID: frozenset[LiteralString] = frozenset(
    "br hr img input link meta".split()
)

HTML_TEXT_ESCAPES = str.maketrans(
    {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#x27;"}
)
HTML_ATTR_ESCAPES = str.maketrans({"&": "&amp;", '"': "&quot;", "<": "&lt;"})


def escape(text: str) -> str:
    return text.translate(HTML_TEXT_ESCAPES)


def escapeAttribute(text: str) -> str:
    return text.translate(HTML_ATTR_ESCAPES)


TNodeContent = Union["Node", str, int]
TAttributeContent = str | int | None


class Node:
    """An element (or a `#text` node) with its attributes and children.
    Attributes set to `None` are rendered without a value."""

    __slots__ = ["name", "attributes", "children"]

    def __init__(
        self,
        name: str,
        children: Iterable[TNodeContent] | None = None,
        attributes: dict[str, TAttributeContent] | None = None,
    ):
        self.name: str = name
        self.attributes: dict[str, TAttributeContent] = dict(attributes or {})
        self.children: list[TNodeContent] = list(children or ())

    def iterHTML(self) -> Iterator[str]:
        if self.name == "#text":
            yield escape(str(self.attributes.get("#value") or ""))
            return
        attrs: str = "".join(
            f" {k}" if v is None else f' {k}="{escapeAttribute(str(v))}"'
            for k, v in self.attributes.items()
        )
        yield f"<{self.name}{attrs}>"
        if self.name in HTML_VOID:
            return
        for child in self.children:
            if isinstance(child, Node):
                yield from child.iterHTML()
            else:
                yield escape(str(child))
        yield f"</{self.name}>"

    def __str__(self) -> str:
        return "".join(self.iterHTML())


def text(value: str) -> Node:
    return Node("#text", attributes={"#value": value})


NodeFactory = Callable[
    [
        VarArg(TNodeContent | list[TNodeContent] | None),
        KwArg(TAttributeContent),
    ],
    Node,
]


def nodeFactory(name: str) -> NodeFactory:
    """Returns a function that creates `name` elements. Children can be
    given as lists, `None` children are skipped, and the `_` attribute
    stands for `class`."""

    def f(
        *children: TNodeContent | list[TNodeContent] | None,
        **attributes: TAttributeContent,
    ) -> Node:
        flattened: list[TNodeContent] = []
        for child in children:
            if isinstance(child, list):
                flattened.extend(child)
            elif child is not None:
                flattened.append(child)
        return Node(
            name,
            [text(_) if isinstance(_, str) else _ for _ in flattened],
            {("class" if k == "_" else k): v for k, v in attributes.items()},
        )

    f.__name__ = name
    return cast(NodeFactory, f)


# Only the elements the listings use
HTML_TAGS: list[LiteralString] = (
    "a body h1 head html li meta small style title ul".split()
)


class Markup:
    """Exposes node factories as attributes, like `H.li(...)`."""

    __slots__ = ["_factories"]

    def __init__(self, factories: dict[str, NodeFactory]):
        self._factories: dict[str, NodeFactory] = factories

    def __getattr__(self, name: str) -> NodeFactory:
        try:
            return self._factories[name]
        except KeyError:
            raise AttributeError(
                f"No tag {name}, pick one of {', '.join(self._factories)}"
            ) from None


H: Markup = Markup({_: nodeFactory(_) for _ in HTML_TAGS})


def html(*nodes: Node, doctype: str | None = None) -> Iterator[str]:
    """Serializes the nodes, preceded by the `<!DOCTYPE>` if given."""
    if doctype:
        yield f"<!DOCTYPE {doctype}>\n"
    for node in nodes:
        yield from node.iterHTML()


# EOF
