"""The 404 page shown when no driver finds a front-controller."""

from functools import cache

from kida import Environment

from valet.http.response import Response

_NOT_FOUND_SOURCE = """\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <title>Valet - Not Found</title>
</head>
<body>
    <h1>404 - Not Found</h1>
    <p>Valet could not find an entry point for <code>{{ uri }}</code> on <strong>{{ site_name }}</strong>.</p>
</body>
</html>
"""


@cache
def _template():
    return Environment(autoescape=True).from_string(_NOT_FOUND_SOURCE)


def render_not_found(site_name: str, uri: str) -> str:
    """Render the 404 page body."""
    return _template().render({"site_name": site_name, "uri": uri})


def not_found_response(site_name: str, uri: str) -> Response:
    return Response(body=render_not_found(site_name, uri), status=404)
