"""
Single-GET fetch collaborator.

Hands the engine exactly one text blob per URL:
  - one GET, no redirects followed, no retries
  - the response body fully drained to text
  - optionally prefixed with the response headers, so the ``set_cookie``
    detector can see them (the body alone never carries them)

Failures are terminal.  They surface as FetchError subclasses and no
classification is attempted on a partial response.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

import requests

from .config import Settings
from .exceptions import RequestConstructionError, TransportError
from .models import FetchedDocument

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: float = Settings.model_fields["fetch_timeout"].default

_CONSTRUCTION_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.InvalidHeader,
)


def fetch_document(
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    include_headers: bool = True,
    session: Optional[requests.Session] = None,
) -> FetchedDocument:
    """GET ``url`` once and return its text for classification.

    Args:
        url: Absolute http(s) URL.
        timeout: Connect/read timeout in seconds.
        include_headers: Prepend the response header block to the body.
        session: Optional session to issue the request with (tests, pooling).

    Raises:
        RequestConstructionError: The URL could not be turned into a request.
        TransportError: The request failed on the wire or timed out.
    """
    if not url or not url.strip():
        raise RequestConstructionError("No URL given", details={"url": url})

    http = session or requests.Session()
    try:
        logger.info("GET %s", url)
        response = http.get(url, timeout=timeout, allow_redirects=False)
        text = response.text  # Drains the body
    except _CONSTRUCTION_ERRORS as e:
        raise RequestConstructionError(
            f"Could not build request for {url!r}: {e}", details={"url": url}
        ) from e
    except requests.RequestException as e:
        raise TransportError(
            f"Request to {url!r} failed: {e}", details={"url": url}
        ) from e
    finally:
        if session is None:
            http.close()

    logger.info("%s -> HTTP %d, %d chars", url, response.status_code, len(text))

    if include_headers:
        text = render_headers(response.headers) + "\n" + text

    return FetchedDocument(url=url, status_code=response.status_code, text=text)


def render_headers(headers: Mapping[str, str]) -> str:
    """Render response headers as ``Name: value`` lines.

    The cookie header is always written as ``Set-Cookie`` so the detector
    matches in case-sensitive mode too, even when the server (or HTTP/2) sent it
    lower-cased.
    """
    lines = []
    for name, value in headers.items():
        if name.lower() == "set-cookie":
            name = "Set-Cookie"
        lines.append(f"{name}: {value}\n")
    return "".join(lines)
