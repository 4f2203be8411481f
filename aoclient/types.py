"""Protocol objects exchanged with the messenger and compute units."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from .errors import ParseError

if TYPE_CHECKING:
    from .dataitem import DataItem


@dataclass(frozen=True)
class Tag:
    name: str
    value: str

    def to_json(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass
class Message:
    """Logical message envelope used for dry runs.

    ``tags`` may be ``None``, which is treated the same as an empty list.
    """

    id: str = ""
    target: str = ""
    owner: str = ""
    data: str = ""
    tags: list[Tag] | None = None

    def to_json(self) -> dict[str, Any]:
        return {
            "Id": self.id,
            "Target": self.target,
            "Owner": self.owner,
            "Data": self.data,
            "Tags": [_tag_json(tag) for tag in self.tags or []],
        }


def _tag_json(tag) -> dict[str, Any]:
    if isinstance(tag, Tag):
        return tag.to_json()
    name, value = tag
    return {"name": name, "value": value}


@dataclass
class Result:
    messages: list[Any] = field(default_factory=list)
    spawns: list[Any] = field(default_factory=list)
    outputs: Any = field(default_factory=list)
    error: str = ""
    gas_used: int = 0

    @classmethod
    def from_json(cls, body: Any) -> "Result":
        """Decode a compute unit result object.

        Missing keys take their defaults. Wrongly typed fields raise
        ``ParseError``.
        """
        if not isinstance(body, dict):
            raise ParseError("Result body must be a JSON object")

        messages = body.get("Messages") or []
        spawns = body.get("Spawns") or []
        if not isinstance(messages, list):
            raise ParseError("Messages must be a list")
        if not isinstance(spawns, list):
            raise ParseError("Spawns must be a list")

        error = body.get("Error")
        if error is None:
            error = ""
        if not isinstance(error, str):
            raise ParseError(f"Error must be a string, got {type(error).__name__}")

        gas_used = body.get("GasUsed")
        if gas_used is None:
            gas_used = 0
        if isinstance(gas_used, bool) or not isinstance(gas_used, int) or gas_used < 0:
            raise ParseError(f"GasUsed must be a non-negative integer: {gas_used!r}")

        outputs = body.get("Outputs")
        return cls(
            messages=messages,
            spawns=spawns,
            outputs=[] if outputs is None else outputs,
            error=error,
            gas_used=gas_used,
        )


class Signer(Protocol):
    """Signing capability consumed by the data item builder.

    ``sign`` receives the unsigned item and returns the raw signature and
    the base64url-encoded public key of the signer.
    """

    def sign(self, item: "DataItem") -> tuple[bytes, str]: ...
