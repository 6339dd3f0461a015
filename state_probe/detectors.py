"""
Pattern detectors — the evidence layer of the classifier.

Each detector is a PURE function of the document body to a boolean:
  - Takes the raw text (markup, optionally with a response-header block)
  - Returns True if its signal is present, False otherwise
  - Never raises, never mutates anything, never touches the network
  - Is independently testable

Detectors are deliberately dumb.  A single one firing proves nothing; the
batteries in batteries.py decide how many must agree.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import partial
from typing import Callable, Iterator


# ─── Patterns ────────────────────────────────────────────────────────

SET_COOKIE_MARKER = "Set-Cookie"

NON_STANDARD_METHODS: tuple[str, ...] = (
    "PUT", "DELETE", "PATCH", "OPTIONS", "HEAD", "TRACE", "CONNECT",
)

SESSION_ID_TOKEN = "PHPSESSID="

_SET_COOKIE_RE_NOCASE = re.compile(re.escape(SET_COOKIE_MARKER), re.IGNORECASE)
# Maximal runs between `&` / whitespace separators
_QUERY_RUN_RE = re.compile(r"[^&\s]+")
_HIDDEN_FIELD_RE = re.compile(r"""type=["']hidden["']""")
_METHOD_RE = re.compile(
    r"""method=["'](?:{})["']""".format("|".join(NON_STANDARD_METHODS))
)
_RESTFUL_URL_RE = re.compile(r"/[A-Za-z0-9_-]+")

_SCRIPT_TAG_RE = re.compile(r"<script|</script>")
_SCRIPT_TAG_RE_NOCASE = re.compile(r"<script|</script>", re.IGNORECASE)

_STATE_MUTATIONS: tuple[str, ...] = ("document.cookie", ".value")


# ─── Detector Record ─────────────────────────────────────────────────


@dataclass(frozen=True)
class Detector:
    """A named boolean check over a document body."""

    name: str
    check: Callable[[str], bool]

    def __call__(self, body: str) -> bool:
        return self.check(body)


# ─── Helpers ─────────────────────────────────────────────────────────


def iter_script_blocks(body: str, case_sensitive: bool = False) -> Iterator[str]:
    """Yield each ``<script…>…</script>`` block lazily, in document order.

    A block runs from an opening tag to the first closing tag after it, so
    adjacent blocks never merge; openers inside an open block are ignored and
    an opener with no closer yields nothing.  One pass over the tag positions,
    so time stays linear however many unclosed openers the page holds.  Lazy,
    so callers can stop at the first hit.
    """
    pattern = _SCRIPT_TAG_RE if case_sensitive else _SCRIPT_TAG_RE_NOCASE
    start = None
    for tag in pattern.finditer(body):
        if tag.group(0)[1] != "/":
            if start is None:
                start = tag.start()
        elif start is not None:
            yield body[start:tag.end()]
            start = None


def _name_starts(text: str, after_amp: bool) -> Iterator[int]:
    """Offsets where a query parameter name may begin, in order."""
    if after_amp:
        yield 0
    mark = text.find("?")
    while mark != -1:
        yield mark + 1
        mark = text.find("?", mark + 1)


def _script_contains(body: str, needles: tuple[str, ...], case_sensitive: bool) -> bool:
    if not case_sensitive:
        needles = tuple(n.lower() for n in needles)
    for block in iter_script_blocks(body, case_sensitive):
        haystack = block if case_sensitive else block.lower()
        if any(needle in haystack for needle in needles):
            return True
    return False


# ─── Stateful Signals ────────────────────────────────────────────────


def has_set_cookie(body: str, *, case_sensitive: bool = False) -> bool:
    """A ``Set-Cookie`` response-header marker appears in the text.

    Case-insensitive by default, so a lower-cased HTTP/2 ``set-cookie:`` line
    counts too.  Only useful when the response headers were prepended; against
    bare markup this is effectively a no-op.
    """
    if case_sensitive:
        return SET_COOKIE_MARKER in body
    return _SET_COOKIE_RE_NOCASE.search(body) is not None


def has_session_id_in_url(body: str) -> bool:
    """A query parameter value embeds a PHPSESSID token (``?x=..PHPSESSID=..``).

    Same language as ``[?&][^=&\\s]+=[^&\\s]*PHPSESSID=[^&\\s]+``, decided in
    linear time: within each run between ``&``/whitespace separators, find the
    first parameter name that starts after a ``?`` (or at the run start when
    ``&`` precedes it), take the ``=`` that ends it, then look for a token with
    a non-empty value after that ``=``.
    """
    for run in _QUERY_RUN_RE.finditer(body):
        text = run.group(0)
        if SESSION_ID_TOKEN not in text:
            continue

        # Earliest non-empty name gives the earliest name-ending `=`
        after_amp = run.start() > 0 and body[run.start() - 1] == "&"
        name_start = next(
            (
                n for n in _name_starts(text, after_amp)
                if n < len(text) and text[n] != "="
            ),
            None,
        )
        if name_start is None:
            continue

        equals = text.find("=", name_start)
        if equals == -1:
            continue
        token = text.find(SESSION_ID_TOKEN, equals + 1)
        if token != -1 and token + len(SESSION_ID_TOKEN) < len(text):
            return True
    return False


def has_hidden_fields(body: str) -> bool:
    """An input declares ``type="hidden"`` or ``type='hidden'``."""
    return _HIDDEN_FIELD_RE.search(body) is not None


def has_script_state(body: str, *, case_sensitive: bool = False) -> bool:
    """Some inline script writes a cookie or mutates a form field value.

    Scanned script by script; stops at the first block that matches.
    """
    return _script_contains(body, _STATE_MUTATIONS, case_sensitive)


def has_non_standard_method(body: str) -> bool:
    """A form or link declares a method other than GET/POST.

    Shared by both batteries: it hints at server-side state (stateful) and at
    resource-oriented verbs (stateless) at the same time.
    """
    return _METHOD_RE.search(body) is not None


def has_ajax_requests(body: str, *, case_sensitive: bool = False) -> bool:
    """An inline script mentions ``xmlhttprequest``."""
    return _script_contains(body, ("xmlhttprequest",), case_sensitive)


def has_websockets(body: str, *, case_sensitive: bool = False) -> bool:
    """An inline script mentions ``websocket``."""
    return _script_contains(body, ("websocket",), case_sensitive)


# ─── Stateless Signals ───────────────────────────────────────────────


def has_restful_urls(body: str) -> bool:
    """A ``/segment`` path appears anywhere.  Weak on purpose."""
    return _RESTFUL_URL_RE.search(body) is not None


def has_query_params(body: str) -> bool:
    """A literal ``?`` appears anywhere."""
    return "?" in body


# ─── Detector Sets ───────────────────────────────────────────────────


def stateful_detectors(case_sensitive: bool = False) -> tuple[Detector, ...]:
    """The seven stateful signals, in declaration order."""
    return (
        Detector("set_cookie", partial(has_set_cookie, case_sensitive=case_sensitive)),
        Detector("session_id_in_url", has_session_id_in_url),
        Detector("hidden_field", has_hidden_fields),
        Detector("script_state", partial(has_script_state, case_sensitive=case_sensitive)),
        Detector("non_standard_method", has_non_standard_method),
        Detector("ajax", partial(has_ajax_requests, case_sensitive=case_sensitive)),
        Detector("websocket", partial(has_websockets, case_sensitive=case_sensitive)),
    )


def stateless_detectors() -> tuple[Detector, ...]:
    """The three stateless signals, in declaration order."""
    return (
        Detector("restful_url", has_restful_urls),
        Detector("query_parameter", has_query_params),
        Detector("non_standard_method", has_non_standard_method),
    )
