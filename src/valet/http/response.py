"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. Immutable by convention,
built incrementally by design.

``content_type=None`` means *no* Content-Type header at all: the upstream
web server decides the type itself. Static file responses rely on this.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    Construct with a body, then chain ``.with_*()`` calls to set
    status and headers. Each call returns a new ``Response``.
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str | None = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Return a new Response with additional headers."""
        new = tuple(headers.items())
        return replace(self, headers=(*self.headers, *new))

    def with_content_type(self, content_type: str) -> Response:
        """Return a new Response with a different content type."""
        return replace(self, content_type=content_type)

    def without_content_type(self) -> Response:
        """Return a new Response that sends no Content-Type header.

        Also strips any ``Content-Type`` added through ``with_header``.
        """
        headers = tuple((k, v) for k, v in self.headers if k.lower() != "content-type")
        return replace(self, content_type=None, headers=headers)

    # -- Wire form --

    def header_items(self) -> list[tuple[str, str]]:
        """Headers as they go on the wire, Content-Type first when set."""
        items: list[tuple[str, str]] = []
        if self.content_type is not None:
            items.append(("Content-Type", self.content_type))
        items.extend(self.headers)
        return items

    def get_header(self, name: str) -> str | None:
        """Return the first value of *name* (case-insensitive), or ``None``."""
        lowered = name.lower()
        for key, value in self.header_items():
            if key.lower() == lowered:
                return value
        return None

    # -- Body helpers --

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body
