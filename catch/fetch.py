from __future__ import annotations

from typing import Optional

import httpx

from .constants import DEFAULT_FETCH_TIMEOUT
from .errors import FetchError


def fetch(url: str, *, timeout: float = DEFAULT_FETCH_TIMEOUT, client: Optional[httpx.Client] = None) -> bytes:
    """GET ``url`` and return the response body.

    Args:
        url: Absolute http(s) URL.
        timeout: Per-request timeout in seconds (ignored when ``client`` is given).
        client: Optional pre-built client; the caller keeps ownership.

    Raises:
        FetchError: On transport errors and non-2xx responses.
    """
    try:
        if client is not None:
            resp = client.get(url, follow_redirects=True)
        else:
            with httpx.Client(timeout=timeout) as own:
                resp = own.get(url, follow_redirects=True)
        resp.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise FetchError(f"{url}: HTTP {exc.response.status_code}") from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise FetchError(f"{url}: {exc}") from exc
    return resp.content


def download(url: str, out_path: str, *, timeout: float = DEFAULT_FETCH_TIMEOUT, client: Optional[httpx.Client] = None) -> bytes:
    """Fetch ``url`` into ``out_path`` and return the bytes written."""
    data = fetch(url, timeout=timeout, client=client)
    with open(out_path, "wb") as f:
        f.write(data)
    return data
