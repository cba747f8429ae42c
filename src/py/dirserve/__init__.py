from .http.model import (  # NOQA: F401
	HTTPRequest,
	HTTPResponse,
	HTTPRequestError,
)
from .decorators import on  # NOQA: F401
from .server import run  # NOQA: F401
from .model import Service, Application, mount  # NOQA: F401
from .config import ServerConfig  # NOQA: F401


# EOF
