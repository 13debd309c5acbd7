"""Catch-all fortune endpoint.

Every path and method lands here and gets one random entry rendered as
HTML with the configured status code.
"""

from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from ..core.document import build_response


# Sync handler: runs in the bounded worker thread pool since storage reads block
def fortune(request: Request) -> Response:
    state = request.app.state
    entry = state.selector.select()
    return build_response(entry, state.config.status_code)


# Plain Starlette route: methods=None matches any verb, including TRACE and
# extension methods that FastAPI's api_route would answer with 405
route = Route("/{tail:path}", fortune, methods=None, include_in_schema=False)
