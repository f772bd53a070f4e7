"""Valet — driver resolution for a local development web front-end.

Given a site directory, a site name and a request URI, valet picks the
driver that understands the project (Laravel, WordPress, a plain PHP
site, ...) and asks it whether the request is a static file or needs a
front-controller script.

Basic usage::

    from valet import dispatch, request_scope

    with request_scope({"HTTP_HOST": "blog.test"}):
        result = dispatch("/Users/me/Sites/blog", "blog", "/posts/1")

    result.classification.outcome   # Outcome.DYNAMIC
    result.classification.path      # ".../public/index.php"

Custom drivers: drop a ``LocalValetDriver.py`` in the site root, or a
``*ValetDriver.py`` file in ``~/.config/valet/Drivers``.
"""

__version__ = "0.1.0-dev"
__all__ = [
    "BasicValetDriver",
    "ConfigurationError",
    "DriverLoadError",
    "DriverResolver",
    "Outcome",
    "Response",
    "ValetConfig",
    "ValetDriver",
    "ValetError",
    "assign",
    "classify",
    "dispatch",
    "request_scope",
    "server_vars",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import valet`` fast while providing a clean top-level API.
    """
    if name == "ValetConfig":
        from valet.config import ValetConfig

        return ValetConfig

    if name in ("ValetDriver", "BasicValetDriver", "DriverResolver", "assign"):
        from valet import drivers as _drivers

        return getattr(_drivers, name)

    if name in ("Outcome", "classify", "dispatch"):
        from valet import server as _server

        return getattr(_server, name)

    if name == "Response":
        from valet.http.response import Response

        return Response

    if name in ("request_scope", "server_vars"):
        from valet import context as _ctx

        return getattr(_ctx, name)

    if name in ("ValetError", "ConfigurationError", "DriverLoadError"):
        from valet import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
