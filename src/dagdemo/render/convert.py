"""Conversion primitives: DOT -> SVG, SVG -> embeddable fragment -> HTML.

These are pure functions over bytes/str. They raise on failure and leave
stage tagging to GraphRenderer.
"""

from __future__ import annotations

import graphviz
import jinja2

_SVG_ROOT = b"<svg"

_HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
</head>
<body>
{{ svg | safe }}
</body>
</html>
"""

_env = jinja2.Environment(
    autoescape=True,
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
)
_document_template = _env.from_string(_HTML_TEMPLATE)


def dot_to_svg(dot_source: str, *, engine: str = "dot") -> bytes:
    """Lay out DOT source with Graphviz and return the SVG image.

    Raises:
        graphviz.ExecutableNotFound: If the Graphviz executable is not installed
        subprocess.CalledProcessError: If Graphviz rejects the source
    """
    return graphviz.Source(dot_source, engine=engine).pipe(format="svg")


def strip_preamble(svg: bytes) -> bytes:
    """Drop everything before the root <svg> element.

    Graphviz prefixes its output with an XML declaration, a DOCTYPE and
    generator comments. None of that is valid inside an HTML body.

    Raises:
        ValueError: If there is no <svg> element
    """
    start = svg.find(_SVG_ROOT)
    if start < 0:
        raise ValueError("no <svg> element in image")
    return svg[start:]


def wrap_document(fragment: bytes, title: str) -> bytes:
    """Embed an SVG fragment in a minimal HTML document."""
    html = _document_template.render(title=title, svg=fragment.decode("utf-8"))
    return html.encode("utf-8")
