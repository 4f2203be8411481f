"""ao Python client SDK v0.1."""

from .client import AOClient
from .identity import Identity, verify_data_item
from .dataitem import DataItem, build_data_item, sign_data_item
from .types import Message, Result, Signer, Tag
from .errors import (
    AOError,
    SignerError,
    BuildError,
    TransportError,
    ParseError,
    ComputationError,
    IdentityError,
    SignatureError,
    ConfigError,
)

__all__ = [
    "AOClient",
    "Identity",
    "verify_data_item",
    "DataItem",
    "build_data_item",
    "sign_data_item",
    "Message",
    "Result",
    "Signer",
    "Tag",
    "AOError",
    "SignerError",
    "BuildError",
    "TransportError",
    "ParseError",
    "ComputationError",
    "IdentityError",
    "SignatureError",
    "ConfigError",
]
