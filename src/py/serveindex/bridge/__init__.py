from .asgi import ServeIndexMiddleware, asgi  # NOQA: F401

# EOF
