from typing import Iterator, ClassVar, Any, Coroutine

from .routing import Handler, Dispatcher
from .http.model import HTTPRequest, HTTPResponse
from .utils.logging import debug

# -----------------------------------------------------------------------------
#
# SERVICE
#
# -----------------------------------------------------------------------------


class Service:
    """Groups the request handlers defined as methods decorated with `@on`.
    A service is mounted once, its routes being prefixed with its `prefix`."""

    PREFIX: ClassVar[str] = ""

    # Attributes that are never handlers, some of them being properties that
    # must not be evaluated while handlers are collected.
    NO_HANDLER: ClassVar[frozenset[str]] = frozenset(
        ("name", "app", "prefix", "handlers", "isMounted", "_handlers")
    )

    def __init__(self, name: str | None = None, *, prefix: str | None = None) -> None:
        self.name: str = name or self.__class__.__name__
        self.prefix: str = prefix or self.PREFIX
        self.app: Application | None = None
        self._handlers: list[Handler] | None = None

    @property
    def isMounted(self) -> bool:
        return self.app is not None

    @property
    def handlers(self) -> list[Handler]:
        if self._handlers is None:
            self._handlers = list(self.iterHandlers())
        return self._handlers

    def iterHandlers(self) -> Iterator[Handler]:
        for name in dir(self):
            if name in self.NO_HANDLER or name.startswith("__"):
                continue
            handler = Handler.Get(getattr(self, name))
            if handler:
                yield handler

    def __repr__(self) -> str:
        return f"(Service {self.name} {self.prefix!r}{' :mounted' if self.isMounted else ''})"


# -----------------------------------------------------------------------------
#
# APPLICATION
#
# -----------------------------------------------------------------------------


class Application:
    """Dispatches requests to the handlers of its services. Requests that no
    route matches get a 404."""

    def __init__(self, services: list[Service] | None = None) -> None:
        self.dispatcher: Dispatcher = Dispatcher()
        self.services: list[Service] = []
        for service in services or ():
            self.mount(service)

    def mount(self, service: Service, prefix: str | None = None) -> Service:
        if service.isMounted:
            raise RuntimeError(f"Service is already mounted: {service}")
        for handler in service.handlers:
            self.dispatcher.register(handler, prefix or service.prefix)
        service.app = self
        self.services.append(service)
        return service

    def process(
        self, request: HTTPRequest
    ) -> HTTPResponse | Coroutine[Any, Any, HTTPResponse]:
        route, params = self.dispatcher.match(request.method, request.path or "/")
        if route and route.handler:
            return route.handler(request, params or {})
        debug("No matching route", Method=request.method, Path=request.path)
        return request.notFound()


def mount(*components: Application | Service) -> Application:
    """Returns the first application given, or a new one, with all the given
    services mounted in order."""
    app: Application = next(
        (_ for _ in components if isinstance(_, Application)), None
    ) or Application()
    for item in components:
        if isinstance(item, Service):
            app.mount(item)
        elif not isinstance(item, Application):
            raise RuntimeError(f"Unsupported component type {type(item)}: {item}")
    return app


# EOF
