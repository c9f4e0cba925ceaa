"""Response rendering — maps an aggregate result to status, body and content type.

Three modes:
  no_body          — status code only
  status_text      — "OK" / "Service Unavailable"
  detailed_report  — minified HTML table, one row per check
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus

import minify_html
from jinja2 import Environment, StrictUndefined, Template

from .engine import AggregateResult
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

PLAIN_TEXT = "text/plain; charset=utf-8"
HTML = "text/html; charset=utf-8"


# ── Models ───────────────────────────────────────────────────────────────────


class ResponseMode(str, Enum):
    NO_BODY = "no_body"
    STATUS_TEXT = "status_text"
    DETAILED_REPORT = "detailed_report"


@dataclass(frozen=True)
class Response:
    """What an endpoint answers with. Written to the HTTP response verbatim."""

    status_code: int
    body: str
    content_type: str


# ── Report template ──────────────────────────────────────────────────────────

REPORT_TEMPLATE = """
<!DOCTYPE html>
<html>
    <head>
        <meta charset="utf-8">
        <title>Health Status</title>
        <style>
            table {
                border-collapse: collapse;
            }
            tr {
                height: 2em;
            }
            td {
                padding-left: 0.7em;
                padding-right: 0.7em;
            }
            .status {
                text-align: center;
            }
            .message {
                font-family: monospace;
            }
            .failing {
                background-color: red;
            }
            .passing {
                background-color: lawngreen;
            }
        </style>
    </head>
    <body>
        <table>
            {% for outcome in outcomes %}
                <tr class="{{ 'passing' if outcome.passed else 'failing' }}">
                    <td class="status">{{ '✔' if outcome.passed else '✘' }}</td>
                    <td class="name">{{ outcome.name }}</td>
                    <td class="message">{{ outcome.error if outcome.error is not none else '' }}</td>
                </tr>
            {% endfor %}
        </table>
    </body>
</html>
"""

_env = Environment(autoescape=True, undefined=StrictUndefined)

_template: Template | None = None
_template_lock = threading.Lock()


def build_template(source: str) -> Template:
    """Minify and compile a report template. Raises ConfigurationError if it is broken."""
    try:
        minified = minify_html.minify(
            source,
            minify_css=True,
            preserve_brace_template_syntax=True,
        )
        return _env.from_string(minified)
    except Exception as e:
        raise ConfigurationError(f"Invalid report template: {e}") from e


def load_report_template() -> Template:
    """Return the shared report template, building it on first use."""
    global _template
    if _template is None:
        with _template_lock:
            if _template is None:
                _template = build_template(REPORT_TEMPLATE)
                logger.debug("Report template compiled")
    return _template


def render_report(result: AggregateResult) -> str:
    return load_report_template().render(outcomes=result.outcomes)


# ── Policy ───────────────────────────────────────────────────────────────────


def status_for(result: AggregateResult) -> HTTPStatus:
    return HTTPStatus.OK if result.healthy else HTTPStatus.SERVICE_UNAVAILABLE


def render(mode: ResponseMode, result: AggregateResult) -> Response:
    """Render an aggregate result according to ``mode``.

    The status code depends only on the result: 200 when every check
    passed, 503 otherwise.
    """
    status = status_for(result)

    if mode is ResponseMode.NO_BODY:
        return Response(status_code=status.value, body="", content_type=PLAIN_TEXT)
    if mode is ResponseMode.STATUS_TEXT:
        return Response(status_code=status.value, body=status.phrase, content_type=PLAIN_TEXT)
    if mode is ResponseMode.DETAILED_REPORT:
        return Response(status_code=status.value, body=render_report(result), content_type=HTML)

    raise ValueError(f"Unknown response mode: {mode!r}")
