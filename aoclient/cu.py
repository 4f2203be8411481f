"""Read client for the compute unit (CU)."""

import logging
from urllib.parse import quote

import requests

from .errors import TransportError
from .result import interpret_result
from .types import Message, Result

_LOG = logging.getLogger(__name__)


class ComputeUnit:
    """Loads results and evaluates dry runs against a compute unit."""

    def __init__(self, url: str, session: requests.Session, timeout: float = 30):
        self.url = url.rstrip("/")
        self._session = session
        self.timeout = timeout

    def load_result(
        self, process_id: str, message_id: str, timeout: float | None = None
    ) -> Result:
        url = f"{self.url}/result/{quote(message_id, safe='')}"
        return self._request(
            "GET", url, params={"process-id": process_id}, timeout=timeout
        )

    def dry_run(self, message: Message, timeout: float | None = None) -> Result:
        url = f"{self.url}/dry-run"
        return self._request(
            "POST",
            url,
            params={"process-id": message.target},
            json=message.to_json(),
            timeout=timeout,
        )

    # -- internal helpers --

    def _request(self, method: str, url: str, timeout: float | None = None, **kwargs) -> Result:
        _LOG.debug("%s %s params=%s", method, url, kwargs.get("params"))
        try:
            resp = self._session.request(
                method,
                url,
                headers={"Accept": "application/json"},
                timeout=self.timeout if timeout is None else timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        return interpret_result(resp.status_code, resp.content)
