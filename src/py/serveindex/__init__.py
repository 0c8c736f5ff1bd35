from .http.model import (
	HTTPRequest,
	HTTPResponse,
	HTTPRequestError,
)  # NOQA: F401
from .config import IndexOptions  # NOQA: F401
from .listing import IndexEntry  # NOQA: F401
from .render import IndexLocals  # NOQA: F401
from .service import ServeIndex, serveIndex  # NOQA: F401
from .bridge.asgi import ServeIndexMiddleware, asgi  # NOQA: F401

__version__ = "1.0.0"

# EOF
