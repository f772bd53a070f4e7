"""Request classification: static file, front-controller, or not served."""

from valet.server.dispatch import Classification, Dispatch, Outcome, classify, dispatch

__all__ = ["Classification", "Dispatch", "Outcome", "classify", "dispatch"]
