"""Write client for the messenger unit (MU)."""

import logging

import requests

from .dataitem import DataItem
from .errors import SignerError, TransportError
from .result import parse_id

_LOG = logging.getLogger(__name__)


class MessengerUnit:
    """Submits signed data items to a messenger unit."""

    def __init__(self, url: str, session: requests.Session, timeout: float = 30):
        self.url = url.rstrip("/")
        self._session = session
        self.timeout = timeout

    def submit(self, item: DataItem, timeout: float | None = None) -> str:
        """POST a signed item to the MU root and return the assigned id.

        Raises:
            SignerError: If the item is unsigned.
            TransportError: On network failure, timeout or non-2xx status.
            ParseError: If the response has no id.
        """
        if not item.is_signed:
            raise SignerError("Refusing to submit an unsigned data item")
        raw = item.to_bytes()
        url = f"{self.url}/"
        _LOG.debug("POST %s item=%s bytes=%d", url, item.id, len(raw))
        try:
            resp = self._session.post(
                url,
                data=raw,
                headers={
                    "Content-Type": "application/octet-stream",
                    "Accept": "application/json",
                },
                timeout=self.timeout if timeout is None else timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"POST {url} failed: {e}") from e
        return parse_id(resp.status_code, resp.content)
