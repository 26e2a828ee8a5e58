"""Two-phase client for the TinyPNG web backend.

``submit`` uploads the raw image and returns a :data:`CompressionOutcome`;
when the outcome is :class:`Optimized`, ``fetch`` downloads the smaller
file from the returned URL.  Neither call retries.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from http.cookiejar import DefaultCookiePolicy
from typing import Any

import requests

from tinyshrink.models.outcome import AlreadyOptimal, CompressionOutcome, Optimized, Rejected

log = logging.getLogger(__name__)

SHRINK_URL = "https://tinypng.com/backend/opt/shrink"
DEFAULT_TIMEOUT = 30.0

# Ratios at or above this are not worth a rewrite, usually because the
# file was optimised before.
REPLACE_THRESHOLD = 0.9

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/111.0.0.0 Safari/537.36"
)

_CHUNK_SIZE = 64 * 1024


class TransportError(Exception):
    """Network failure, bad response or expired deadline on a remote call."""


class RequestCancelled(TransportError):
    """The caller's cancel event was set while a call was pending."""


def random_forwarded_for() -> str:
    """Return a random dotted-quad address with every octet in 1..254."""
    return ".".join(str(random.randint(1, 254)) for _ in range(4))


def browser_headers() -> dict[str, str]:
    """Headers for one upload; X-Forwarded-For changes on every call."""
    return {
        "User-Agent": USER_AGENT,
        "X-Forwarded-For": random_forwarded_for(),
        "Postman-Token": str(int(time.time() * 1000)),
        "Cache-Control": "no-cache",
        "Content-Type": "application/x-www-form-urlencoded",
    }


def parse_outcome(payload: Any) -> CompressionOutcome:
    """Map the shrink endpoint's JSON body to an outcome.

    Raises:
        TransportError: If the body has neither ``error`` nor a usable
            ``output`` object.
    """
    if not isinstance(payload, dict):
        raise TransportError(f"Unexpected response body: {payload!r}")
    if payload.get("error"):
        return Rejected(error=str(payload["error"]), message=str(payload.get("message", "")))

    output = payload.get("output")
    if not isinstance(output, dict) or "ratio" not in output:
        raise TransportError("Response is missing 'output.ratio'")
    input_ = payload.get("input") or {}

    try:
        ratio = float(output["ratio"])
        input_size = int(input_.get("size", 0))
        output_size = int(output.get("size", 0))
    except (TypeError, ValueError) as e:
        raise TransportError(f"Malformed sizes in response: {e}") from e

    if ratio >= REPLACE_THRESHOLD:
        return AlreadyOptimal(input_size=input_size, output_size=output_size, ratio=ratio)
    url = output.get("url")
    if not url:
        raise TransportError("Response is missing 'output.url'")
    return Optimized(input_size=input_size, output_size=output_size, ratio=ratio, url=str(url))


class CompressionClient:
    """Stateless wrapper around the shrink and download requests.

    The underlying :class:`requests.Session` only pools connections; its
    cookie policy rejects every cookie so that one call never influences
    the next.

    Args:
        endpoint: URL of the shrink endpoint.
        timeout: Deadline in seconds for each call, covering the whole
            download for :meth:`fetch`.
        session: Optional session to use instead of a fresh one.
    """

    def __init__(
        self,
        endpoint: str = SHRINK_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
        self._session = session

    def submit(self, data: bytes, cancel: threading.Event | None = None) -> CompressionOutcome:
        """Upload *data* and classify the service's answer."""
        _check_cancel(cancel)
        try:
            response = self._session.post(
                self.endpoint, data=data, headers=browser_headers(), timeout=self.timeout
            )
        except requests.Timeout as e:
            raise TransportError(f"Upload timed out after {self.timeout:g}s") from e
        except requests.RequestException as e:
            raise TransportError(f"Upload failed: {e}") from e
        _check_cancel(cancel)

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError(f"HTTP {response.status_code}: response is not JSON") from e

        if not response.ok and not (isinstance(payload, dict) and payload.get("error")):
            raise TransportError(f"HTTP {response.status_code} from {self.endpoint}")

        outcome = parse_outcome(payload)
        log.debug("Shrink response: %s", outcome)
        return outcome

    def fetch(
        self,
        url: str,
        expected_size: int | None = None,
        cancel: threading.Event | None = None,
    ) -> bytes:
        """Download the optimized file at *url* and return its bytes unchanged.

        An empty body, or one whose length differs from a positive
        *expected_size*, raises :class:`TransportError` so that it never
        reaches the disk.
        """
        _check_cancel(cancel)
        deadline = time.monotonic() + self.timeout
        chunks: list[bytes] = []
        try:
            with self._session.get(
                url, headers={"User-Agent": USER_AGENT}, timeout=self.timeout, stream=True
            ) as response:
                response.raise_for_status()
                for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                    _check_cancel(cancel)
                    if time.monotonic() > deadline:
                        raise TransportError(f"Download exceeded {self.timeout:g}s deadline")
                    chunks.append(chunk)
        except requests.Timeout as e:
            raise TransportError(f"Download timed out after {self.timeout:g}s") from e
        except requests.RequestException as e:
            raise TransportError(f"Download failed: {e}") from e
        body = b"".join(chunks)
        if not body:
            raise TransportError(f"Empty download from {url}")
        if expected_size and len(body) != expected_size:
            raise TransportError(f"Download size {len(body)} does not match announced {expected_size} bytes")
        return body


def _check_cancel(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise RequestCancelled("Cancelled")
