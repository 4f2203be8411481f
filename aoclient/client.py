"""High-level ao client: spawn, send, load results, and dry run.

Environment variables (all overridable via constructor args):
    AO_CU_URL      – compute unit base URL  (default https://cu.ao-testnet.xyz)
    AO_MU_URL      – messenger unit base URL (default https://mu.ao-testnet.xyz)
    AO_SCHEDULER   – scheduler id tagged on spawned processes
    AO_TIMEOUT     – per-request timeout in seconds (default 30)
    AO_WALLET      – path to a raw ed25519 key, used by ``from_env`` as signer
"""

from __future__ import annotations

import dataclasses
import logging
import os

import requests

from .cu import ComputeUnit
from .dataitem import build_message_item, build_spawn_item, sign_data_item
from .errors import BuildError, ConfigError
from .identity import Identity
from .mu import MessengerUnit
from .tags import TYPE_MESSAGE, protocol_tags
from .types import Message, Result, Signer

_LOG = logging.getLogger(__name__)

DEFAULT_CU_URL = "https://cu.ao-testnet.xyz"
DEFAULT_MU_URL = "https://mu.ao-testnet.xyz"
DEFAULT_SCHEDULER = "_GQ33BkPtZrqxA84vM8Zk-N2aO0toNNu_C-l-rawrBA"
DEFAULT_TIMEOUT = 30.0


def _env_timeout() -> float:
    raw = os.environ.get("AO_TIMEOUT")
    if raw is None:
        return DEFAULT_TIMEOUT
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"AO_TIMEOUT must be a number of seconds: {raw!r}") from e


class AOClient:
    """Client for the messenger unit (writes) and compute unit (reads).

    Writes are never retried or deduplicated: calling ``spawn`` or
    ``send_message`` twice creates two processes or two messages. Reads
    are side-effect free. Instances hold no mutable state besides the
    HTTP session and can be shared between threads.
    """

    def __init__(
        self,
        cu_url: str | None = None,
        mu_url: str | None = None,
        signer: Signer | None = None,
        session: requests.Session | None = None,
        timeout: float | None = None,
        scheduler: str | None = None,
    ):
        """Initialize client endpoints and an optional default signer.

        Args:
            cu_url: Compute unit base URL.
            mu_url: Messenger unit base URL.
            signer: Default signing capability for writes.
            session: HTTP session to reuse; one is created if omitted.
            timeout: Default per-request timeout in seconds.
            scheduler: Scheduler id tagged on spawned processes.
        """
        self.cu_url = (cu_url or os.environ.get("AO_CU_URL", DEFAULT_CU_URL)).rstrip("/")
        self.mu_url = (mu_url or os.environ.get("AO_MU_URL", DEFAULT_MU_URL)).rstrip("/")
        self.scheduler = scheduler or os.environ.get("AO_SCHEDULER", DEFAULT_SCHEDULER)
        self.timeout = timeout if timeout is not None else _env_timeout()
        self.signer = signer

        self._session = session or requests.Session()
        self._mu = MessengerUnit(self.mu_url, self._session, self.timeout)
        self._cu = ComputeUnit(self.cu_url, self._session, self.timeout)

    @classmethod
    def from_env(cls) -> "AOClient":
        """Build a client from environment variables, loading AO_WALLET if set."""
        wallet = os.environ.get("AO_WALLET")
        return cls(signer=Identity.load(wallet) if wallet else None)

    def spawn(
        self,
        module: str,
        data: bytes | None = None,
        tags=None,
        signer: Signer | None = None,
        timeout: float | None = None,
    ) -> str:
        """Create, sign, and submit a process spawn.

        Returns:
            The new process id.

        Raises:
            BuildError: If *module* is empty or a tag is invalid.
            SignerError: If no signer is available or signing fails.
            TransportError: On network failure or non-2xx status.
            ParseError: If the response carries no id.
        """
        item = build_spawn_item(module, data, tags, self.scheduler)
        sign_data_item(item, signer or self.signer)
        process_id = self._mu.submit(item, timeout=timeout)
        _LOG.info("spawned process %s module=%s", process_id, module)
        return process_id

    def send_message(
        self,
        process: str,
        data: str = "",
        tags=None,
        anchor: str | None = None,
        signer: Signer | None = None,
        timeout: float | None = None,
    ) -> str:
        """Create, sign, and submit a message to *process*.

        Returns:
            The message id.

        Raises:
            BuildError: If *process* is empty or a field is invalid.
            SignerError: If no signer is available or signing fails.
            TransportError: On network failure or non-2xx status.
            ParseError: If the response carries no id.
        """
        item = build_message_item(process, data, tags, anchor)
        sign_data_item(item, signer or self.signer)
        message_id = self._mu.submit(item, timeout=timeout)
        _LOG.info("sent message %s to process %s", message_id, process)
        return message_id

    def load_result(
        self, process_id: str, message_id: str, timeout: float | None = None
    ) -> Result:
        """Fetch the result of *message_id* evaluated by *process_id*.

        Raises:
            BuildError: If either id is empty.
            TransportError: On network failure or non-2xx status.
            ParseError: If the body is not a result object.
            ComputationError: If the result reports an error.
        """
        if not process_id or not message_id:
            raise BuildError("process_id and message_id are required")
        return self._cu.load_result(process_id, message_id, timeout=timeout)

    def dry_run(self, message: Message, timeout: float | None = None) -> Result:
        """Evaluate *message* against its target without persisting it.

        The message is sent unsigned with protocol tags prepended to its own.
        Its fields are passed through unchecked; the compute unit judges them.
        """
        tags = protocol_tags(TYPE_MESSAGE) + list(message.tags or [])
        envelope = dataclasses.replace(message, tags=tags)
        return self._cu.dry_run(envelope, timeout=timeout)
