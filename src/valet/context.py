"""Request-scoped server variables via ContextVar.

Provides ``server``: the mutable ``$_SERVER``-style mapping drivers fill
in while computing a front-controller (``SCRIPT_FILENAME``,
``DOCUMENT_ROOT``, ...) and that the environment loader writes site
variables into. ``request_scope()`` gives each request a fresh mapping
and restores the previous one afterwards.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local across
    worker threads. No locks needed.
"""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar

_server_var: ContextVar[dict[str, str] | None] = ContextVar("valet_server", default=None)
_scoped_var: ContextVar[bool] = ContextVar("valet_scoped", default=False)


def server_vars() -> dict[str, str]:
    """Return the server variables for the current request.

    Created on first access when no ``request_scope()`` is active.
    """
    current = _server_var.get()
    if current is None:
        current = {}
        _server_var.set(current)
    return current


@contextmanager
def request_scope(initial: Mapping[str, str] | None = None) -> Iterator[dict[str, str]]:
    """Run a block with its own, isolated server variables.

    Usage::

        with request_scope({"HTTP_HOST": "blog.test"}) as server:
            driver.front_controller_path(site_path, "blog", "/")
            server["SCRIPT_FILENAME"]
    """
    scope = dict(initial or {})
    token = _server_var.set(scope)
    scoped = _scoped_var.set(True)
    try:
        yield scope
    finally:
        _scoped_var.reset(scoped)
        _server_var.reset(token)


def in_request_scope() -> bool:
    """Whether a ``request_scope()`` is active in the current context."""
    return _scoped_var.get()
