"""Exceptions for tokens app."""


class UnauthorizedError(Exception):
    """Raised when credentials or a bearer token are not accepted."""
