"""HTML document construction for fortunes.

Entry bodies are trusted markup from the data source and are inserted
verbatim; no escaping happens here.
"""

from starlette.responses import HTMLResponse

from .models_io import Entry

DOCUMENT_TEMPLATE = (
    '<!DOCTYPE html><html><head><meta charset="UTF-8"></head>'
    "<body>{body}</body></html>"
)
NO_CONTENT_BODY = "No content available."

# HTTP forbids a message body with these
BODYLESS_STATUS_CODES = (204, 304)


def render_document(body: str) -> str:
    # str.format would choke on braces inside the body
    head, tail = DOCUMENT_TEMPLATE.split("{body}")
    return head + body + tail


def build_response(entry: Entry, status_code: int) -> HTMLResponse:
    """Wrap an entry in the HTML skeleton with the configured status."""
    if status_code in BODYLESS_STATUS_CODES:
        return HTMLResponse(content=None, status_code=status_code)
    return HTMLResponse(content=render_document(entry.body), status_code=status_code)


def build_no_content_response(status_code: int = 503) -> HTMLResponse:
    return HTMLResponse(content=render_document(NO_CONTENT_BODY), status_code=status_code)
