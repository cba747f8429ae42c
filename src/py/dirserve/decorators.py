from typing import ClassVar, Union, Callable, TypeVar, Any, cast

T = TypeVar("T")


class Meta:
    """Defines the attributes used by decorators to annotate handlers"""

    ON: ClassVar[str] = "_dirserve_on"
    ON_PRIORITY: ClassVar[str] = "_dirserve_on_priority"

    @staticmethod
    def Get(scope: Any) -> dict[str, Any]:
        """Returns the dictionary of meta attributes for the given value."""
        if hasattr(scope, "__dict__"):
            return cast(dict[str, Any], scope.__dict__)
        else:
            raise RuntimeError(f"Metadata cannot be attached to object: {scope}")


def on(
    priority: int = 0, **methods: Union[str, list[str], tuple[str, ...]]
) -> Callable[[T], T]:
    """The @on decorator marks a method as a request handler.

    It takes `GET`, `POST`, etc. arguments, each being either a string or a
    list of strings, each describing a URI pattern (see `Route`) that, when
    matched, triggers the method. Methods can be combined with an underscore,
    like `GET_HEAD`.

    For instance:

    >    @on(GET='/list/{what:any}')

    implies that the wrapped method is like

    >    def listThings( self, request, what ):
    >        return request.respond(...)

    When more than one handler match, the one with the highest `priority`
    wins."""

    def decorator(function: T) -> T:
        meta = Meta.Get(function)
        v = meta.setdefault(Meta.ON, [])
        meta.setdefault(Meta.ON_PRIORITY, priority)
        for http_methods, url in list(methods.items()):
            urls = (url,) if isinstance(url, str) else url
            for http_method in http_methods.upper().split("_"):
                for _ in urls:
                    v.append((http_method, _))
        return function

    return decorator


# EOF
