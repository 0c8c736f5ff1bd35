from .model import HTTPRequest, HTTPResponse, HTTPRequestError  # NOQA: F401

# EOF
