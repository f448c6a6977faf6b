"""HTML views for the upload page.

Each view is a function of the page context (title, page and file URIs, and
the request data) returning a full HTML document. ``data`` is ``None`` for
the plain upload form and a name map after an upload.
"""
from __future__ import annotations

from html import escape
from typing import TYPE_CHECKING, Callable, Dict, Mapping, Optional

if TYPE_CHECKING:
    from .core.config import Settings

_FORM = """
<form action="/" method="post" enctype="multipart/form-data">
  <input type="file" name="files" multiple>
  <input type="submit" value="Upload">
</form>"""


def _file_url(file_uri: str, name: str) -> str:
    return f"{file_uri.rstrip('/')}/{name}"


def _minimal(title: str, page_uri: str, file_uri: str, data: Optional[Mapping[str, str]]) -> str:
    items = ""
    if data is not None:
        rows = "".join(
            f'\n    <li><a href="{escape(_file_url(file_uri, stored))}">{escape(stored)}</a>'
            f" ({escape(original)})</li>"
            for stored, original in data.items()
        )
        items = f"\n  <ul>{rows}\n  </ul>" if rows else "\n  <p>No files uploaded.</p>"
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{escape(title)}</title>
</head>
<body>
  <h1><a href="{escape(page_uri)}">{escape(title)}</a></h1>{_FORM}{items}
</body>
</html>
"""


def _index(title: str, page_uri: str, file_uri: str, data: Optional[Mapping[str, str]]) -> str:
    body = ""
    if data is not None:
        if data:
            rows = "".join(
                f"\n      <tr><td><a href=\"{escape(_file_url(file_uri, stored))}\">"
                f"{escape(_file_url(file_uri, stored))}</a></td><td>{escape(original)}</td></tr>"
                for stored, original in data.items()
            )
            body = (
                '\n  <table class="uploads">'
                "\n    <thead><tr><th>Link</th><th>Original name</th></tr></thead>"
                f"\n    <tbody>{rows}\n    </tbody>\n  </table>"
            )
        else:
            body = '\n  <p class="empty">Upload successful, but the request carried no files.</p>'
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{escape(title)}</title>
  <style>
    body {{ font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto; padding: 20px; }}
    table.uploads {{ border-collapse: collapse; width: 100%; margin-top: 20px; }}
    table.uploads td, table.uploads th {{ border-bottom: 1px solid #ddd; padding: 6px; text-align: left; }}
  </style>
</head>
<body>
  <h1><a href="{escape(page_uri)}">{escape(title)}</a></h1>
  <p>Files are stored under <code>{escape(file_uri)}</code>; identical uploads share one link.</p>{_FORM}{body}
</body>
</html>
"""


VIEWS: Dict[str, Callable[..., str]] = {
    "minimal": _minimal,
    "index": _index,
}


def render(view: str, settings: "Settings", data: Optional[Mapping[str, str]] = None) -> str:
    """Render ``view`` with the page context taken from ``settings``."""
    try:
        template = VIEWS[view]
    except KeyError:
        raise ValueError(f"unknown view {view!r}") from None
    return template(settings.title, settings.page_uri, settings.file_uri, data)
