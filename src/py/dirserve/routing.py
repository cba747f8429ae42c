from typing import (
    Callable,
    Any,
    Pattern,
    NamedTuple,
    ClassVar,
)
from inspect import iscoroutine
import re

from .decorators import Meta
from .http.model import HTTPRequest, HTTPRequestError, HTTPResponse
from .utils.logging import debug


async def awaited(value: Any) -> Any:
    return (await value) if iscoroutine(value) else value


# -----------------------------------------------------------------------------
#
# ROUTE
#
# -----------------------------------------------------------------------------


class RoutePattern(NamedTuple):
    """The regular expression a parameter must match, and the function that
    converts the matched text."""

    expr: str
    extractor: Callable[[str], Any]


class Route:
    """A path template like `/items/{id:any}`. Each `{name:pattern}`
    placeholder becomes a parameter passed to the handler,
    everything else has to match literally."""

    RE_PARAMETER: ClassVar[Pattern[str]] = re.compile(
        r"\{(?P<name>[A-Za-z_]\w*)(:(?P<pattern>[^}]+))?\}"
    )

    # `any` may be empty and span many segments
    PATTERNS: ClassVar[dict[str, RoutePattern]] = {
        "any": RoutePattern(r".*", str),
    }

    @classmethod
    def Compile(cls, text: str) -> tuple[Pattern[str], dict[str, RoutePattern]]:
        """Returns the regular expression matching the whole template, along
        with the patterns of its parameters."""
        params: dict[str, RoutePattern] = {}
        expr: list[str] = []
        offset: int = 0
        for match in cls.RE_PARAMETER.finditer(text):
            name: str = match.group("name")
            kind: str = (match.group("pattern") or name).lower()
            pattern: RoutePattern | None = cls.PATTERNS.get(kind)
            if not pattern:
                raise ValueError(
                    f"Route pattern '{kind}' in '{text}' is not registered, pick one of: {', '.join(sorted(cls.PATTERNS))}"
                )
            params[name] = pattern
            expr.append(re.escape(text[offset : match.start()]))
            expr.append(f"(?P<{name}>{pattern.expr})")
            offset = match.end()
        expr.append(re.escape(text[offset:]))
        return re.compile(f"^{''.join(expr)}$"), params

    def __init__(self, text: str, handler: "Handler | None" = None):
        self.text: str = text
        self.regexp, self.params = self.Compile(text)
        self.handler: Handler | None = handler

    @property
    def priority(self) -> int:
        return self.handler.priority if self.handler else 0

    def match(self, path: str) -> dict[str, Any] | None:
        """Returns the extracted parameters when the path matches."""
        matched = self.regexp.match(path)
        if not matched:
            return None
        return {k: v.extractor(matched.group(k)) for k, v in self.params.items()}

    def __repr__(self) -> str:
        return f"(Route {self.text!r} {self.priority})"


# -----------------------------------------------------------------------------
#
# HANDLER
#
# -----------------------------------------------------------------------------


class Handler:
    """Wraps a function decorated with `@on`, which may be synchronous or
    asynchronous, along with the paths it responds to for each method."""

    @classmethod
    def Get(cls, value: Any) -> "Handler | None":
        methods = getattr(value, Meta.ON, None)
        if not methods:
            return None
        return Handler(value, methods, getattr(value, Meta.ON_PRIORITY, 0))

    def __init__(
        self,
        functor: Callable[..., Any],
        methods: list[tuple[str, str]],
        priority: int = 0,
    ):
        self.functor = functor
        self.priority: int = priority
        self.methods: dict[str, list[str]] = {}
        for method, path in methods:
            self.methods.setdefault(method, []).append(path)

    async def __call__(
        self, request: HTTPRequest, params: dict[str, Any]
    ) -> HTTPResponse:
        try:
            return await awaited(self.functor(request, **params))
        except HTTPRequestError as e:
            return request.error(
                e.status or 500, e.message, contentType=e.contentType or "text/plain"
            )

    def __repr__(self) -> str:
        return f"(Handler {self.priority} {self.methods} {self.functor!r})"


# -----------------------------------------------------------------------------
#
# DISPATCHER
#
# -----------------------------------------------------------------------------


class Dispatcher:
    """Maps requests to routes. Routes are kept by method, in decreasing
    priority, so that the first match wins. Routes of the same priority are
    kept in registration order."""

    def __init__(self) -> None:
        self.routes: dict[str, list[Route]] = {}

    def register(self, handler: Handler, prefix: str | None = None) -> "Dispatcher":
        for method, paths in handler.methods.items():
            routes = self.routes.setdefault(method, [])
            for path in paths:
                path = f"{prefix.rstrip('/')}{path}" if prefix else path
                if not path.startswith("/"):
                    path = f"/{path}"
                debug("Registered route", Method=method, Path=path)
                routes.append(Route(path, handler))
            # The sort is stable, which preserves the registration order
            routes.sort(key=lambda _: -_.priority)
        return self

    def match(self, method: str, path: str) -> tuple[Route | None, dict[str, Any] | None]:
        """Returns the first route that matches, with its parameters, or
        `(None, None)`."""
        for route in self.routes.get(method, ()):
            params = route.match(path)
            if params is not None:
                return route, params
        return None, None


# EOF
