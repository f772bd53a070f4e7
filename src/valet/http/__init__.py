"""HTTP value objects produced by the dispatch layer."""

from valet.http.response import Response

__all__ = ["Response"]
