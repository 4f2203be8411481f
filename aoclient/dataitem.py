"""Data item construction, signing, and binary encoding per ANS-104.

A data item is built unsigned, handed to a signer, and then encoded to the
binary layout the messenger unit accepts::

    signature type   2 bytes, little endian
    signature        length depends on signature type
    owner            length depends on signature type
    target           1 presence byte (+ 32 bytes)
    anchor           1 presence byte (+ 32 bytes)
    tag count        8 bytes, little endian
    tag bytes length 8 bytes, little endian
    tags             Avro-encoded array of {name, value}
    data             remainder
"""

import base64
import binascii
import hashlib
import logging
import re
import struct
from dataclasses import dataclass, field

from .errors import BuildError, ParseError, SignerError
from .tags import message_tags, normalize_tags, spawn_tags
from .types import Tag

_LOG = logging.getLogger(__name__)

SIGNATURE_TYPE_ARWEAVE = 1
SIGNATURE_TYPE_ED25519 = 2
SIGNATURE_TYPE_ETHEREUM = 3

# signature type -> (signature length, owner length)
SIGNATURE_LENGTHS = {
    SIGNATURE_TYPE_ARWEAVE: (512, 512),
    SIGNATURE_TYPE_ED25519: (64, 32),
    SIGNATURE_TYPE_ETHEREUM: (65, 65),
}

ID_LENGTH = 32
ANCHOR_LENGTH = 32
MAX_TAGS = 128
MAX_TAG_NAME_BYTES = 1024
MAX_TAG_VALUE_BYTES = 3072

_BASE64_URL_RE = re.compile(r"^[A-Za-z0-9_-]*$")


def b64url_encode(raw: bytes) -> str:
    """Base64url without padding, as used for ids and owners."""
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def b64url_decode(value: str) -> bytes:
    """Decode unpadded base64url.

    Raises:
        ValueError: If *value* is not base64url.
    """
    if not isinstance(value, str) or not _BASE64_URL_RE.match(value):
        raise ValueError(f"not base64url: {value!r}")
    try:
        return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))
    except binascii.Error as e:
        raise ValueError(f"not base64url: {value!r}") from e


def deep_hash(chunk) -> bytes:
    """Arweave deep hash (SHA-384) of a blob or nested list of blobs."""
    if isinstance(chunk, list):
        acc = _sha384(b"list" + str(len(chunk)).encode("ascii"))
        for item in chunk:
            acc = _sha384(acc + deep_hash(item))
        return acc
    tag = _sha384(b"blob" + str(len(chunk)).encode("ascii"))
    return _sha384(tag + _sha384(chunk))


def _sha384(data: bytes) -> bytes:
    return hashlib.sha384(data).digest()


# -- Avro tag encoding --

def _encode_long(n: int) -> bytes:
    z = (n << 1) ^ (n >> 63)
    out = bytearray()
    while z & ~0x7F:
        out.append((z & 0x7F) | 0x80)
        z >>= 7
    out.append(z)
    return bytes(out)


def _decode_long(buf: bytes, pos: int) -> tuple[int, int]:
    shift = 0
    z = 0
    while True:
        if pos >= len(buf):
            raise ParseError("Truncated tag encoding")
        b = buf[pos]
        pos += 1
        z |= (b & 0x7F) << shift
        if not b & 0x80:
            break
        shift += 7
    return (z >> 1) ^ -(z & 1), pos


def _decode_bytes(buf: bytes, pos: int) -> tuple[bytes, int]:
    length, pos = _decode_long(buf, pos)
    if length < 0 or pos + length > len(buf):
        raise ParseError("Truncated tag encoding")
    return buf[pos:pos + length], pos + length


def encode_tags(tags: list[Tag]) -> bytes:
    """Avro-encode *tags*; an empty tag list encodes to no bytes at all."""
    if not tags:
        return b""
    out = bytearray(_encode_long(len(tags)))
    for tag in tags:
        for part in (tag.name.encode("utf-8"), tag.value.encode("utf-8")):
            out += _encode_long(len(part))
            out += part
    out += _encode_long(0)
    return bytes(out)


def decode_tags(raw: bytes) -> list[Tag]:
    tags: list[Tag] = []
    if not raw:
        return tags
    pos = 0
    while True:
        count, pos = _decode_long(raw, pos)
        if count == 0:
            break
        if count < 0:
            # negative block count is followed by the block size in bytes
            _, pos = _decode_long(raw, pos)
            count = -count
        for _ in range(count):
            name, pos = _decode_bytes(raw, pos)
            value, pos = _decode_bytes(raw, pos)
            try:
                tags.append(Tag(name.decode("utf-8"), value.decode("utf-8")))
            except UnicodeDecodeError as e:
                raise ParseError(f"Tag is not valid UTF-8: {e}") from e
    if pos != len(raw):
        raise ParseError("Trailing bytes after tag encoding")
    return tags


def _target_field(value: str) -> bytes:
    """Fixed-width target field for *value*.

    Process ids decode to exactly 32 bytes. Any other target is packed into
    the field as is: base64url-decoded when possible, else UTF-8, then zero
    padded or cut to 32 bytes.
    """
    try:
        raw = b64url_decode(value)
    except ValueError:
        raw = value.encode("utf-8")
    return raw[:ID_LENGTH].ljust(ID_LENGTH, b"\x00")


def _encode_anchor(value: str) -> bytes:
    raw = value.encode("utf-8")
    if len(raw) != ANCHOR_LENGTH:
        raise BuildError(
            f"anchor must be exactly {ANCHOR_LENGTH} bytes, got {len(raw)}"
        )
    return raw


@dataclass
class DataItem:
    """A binary-addressable item submitted to the messenger unit.

    ``owner``, ``signature``, ``signature_type`` and ``id`` are filled in by
    :func:`sign_data_item`.
    """

    target: str = ""
    anchor: str = ""
    tags: list[Tag] = field(default_factory=list)
    data: bytes = b""
    owner: str = ""
    signature: bytes | None = None
    signature_type: int | None = None
    id: str = ""

    @property
    def is_signed(self) -> bool:
        return self.signature is not None

    def _target_bytes(self) -> bytes:
        return _target_field(self.target) if self.target else b""

    def _anchor_bytes(self) -> bytes:
        return _encode_anchor(self.anchor) if self.anchor else b""

    def signature_data(self, signature_type: int, owner: bytes) -> bytes:
        """Message a signer of *signature_type* with public key *owner* signs."""
        return deep_hash([
            b"dataitem",
            b"1",
            str(signature_type).encode("ascii"),
            owner,
            self._target_bytes(),
            self._anchor_bytes(),
            encode_tags(self.tags),
            self.data,
        ])

    def to_bytes(self) -> bytes:
        """Binary encoding of a signed item.

        Raises:
            BuildError: If the item has not been signed.
        """
        if not self.is_signed:
            raise BuildError("Data item must be signed before encoding")

        target = self._target_bytes()
        anchor = self._anchor_bytes()
        tag_bytes = encode_tags(self.tags)
        parts = [
            struct.pack("<H", self.signature_type),
            self.signature,
            b64url_decode(self.owner),
            b"\x01" + target if target else b"\x00",
            b"\x01" + anchor if anchor else b"\x00",
            struct.pack("<QQ", len(self.tags), len(tag_bytes)),
            tag_bytes,
            self.data,
        ]
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, raw: bytes) -> "DataItem":
        """Decode a binary data item.

        Raises:
            ParseError: On any structural violation.
        """
        reader = _Reader(raw)
        (signature_type,) = struct.unpack("<H", reader.take(2))
        lengths = SIGNATURE_LENGTHS.get(signature_type)
        if lengths is None:
            raise ParseError(f"Unknown signature type: {signature_type}")
        signature = reader.take(lengths[0])
        owner = reader.take(lengths[1])
        target = reader.take(ID_LENGTH) if reader.flag("target") else b""
        anchor = reader.take(ANCHOR_LENGTH) if reader.flag("anchor") else b""
        tag_count, tag_length = struct.unpack("<QQ", reader.take(16))
        tags = decode_tags(reader.take(tag_length))
        if len(tags) != tag_count:
            raise ParseError(
                f"Tag count mismatch: header says {tag_count}, found {len(tags)}"
            )
        try:
            anchor_text = anchor.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"anchor is not valid UTF-8: {e}") from e

        return cls(
            target=b64url_encode(target) if target else "",
            anchor=anchor_text,
            tags=tags,
            data=reader.rest(),
            owner=b64url_encode(owner),
            signature=signature,
            signature_type=signature_type,
            id=b64url_encode(hashlib.sha256(signature).digest()),
        )


class _Reader:
    def __init__(self, raw: bytes):
        self._raw = raw
        self._pos = 0

    def take(self, n: int) -> bytes:
        end = self._pos + n
        if end > len(self._raw):
            raise ParseError("Truncated data item")
        chunk = self._raw[self._pos:end]
        self._pos = end
        return chunk

    def flag(self, field_name: str) -> bool:
        value = self.take(1)[0]
        if value not in (0, 1):
            raise ParseError(f"Invalid {field_name} presence byte: {value}")
        return value == 1

    def rest(self) -> bytes:
        return self._raw[self._pos:]


def build_data_item(
    target: str = "",
    anchor: str | None = None,
    data: bytes | str | None = None,
    tags=None,
) -> DataItem:
    """Build an unsigned data item.

    Args:
        target: Destination process id, or empty for a spawn.
        anchor: Optional 32-byte nonce.
        data: Payload; ``None`` is empty and ``str`` is UTF-8 encoded.
        tags: Assembled tag set.

    Raises:
        BuildError: If a field is malformed or a tag limit is exceeded.
    """
    if data is None:
        data = b""
    elif isinstance(data, str):
        data = data.encode("utf-8")
    elif not isinstance(data, (bytes, bytearray)):
        raise BuildError(f"data must be bytes or str, got {type(data).__name__}")

    if anchor:
        _encode_anchor(anchor)

    tags = normalize_tags(tags)
    if len(tags) > MAX_TAGS:
        raise BuildError(f"Too many tags: {len(tags)} > {MAX_TAGS}")
    for tag in tags:
        if len(tag.name.encode("utf-8")) > MAX_TAG_NAME_BYTES:
            raise BuildError(f"Tag name too long: {tag.name[:32]!r}...")
        if len(tag.value.encode("utf-8")) > MAX_TAG_VALUE_BYTES:
            raise BuildError(f"Tag value too long for {tag.name!r}")

    return DataItem(target=target or "", anchor=anchor or "", tags=tags, data=bytes(data))


def build_spawn_item(
    module: str,
    data: bytes | None = None,
    tags=None,
    scheduler: str | None = None,
) -> DataItem:
    """Unsigned "Process" item instantiating *module*."""
    return build_data_item(data=data, tags=spawn_tags(module, scheduler, tags))


def build_message_item(
    process: str,
    data: str | None = "",
    tags=None,
    anchor: str | None = None,
) -> DataItem:
    """Unsigned "Message" item addressed to *process*."""
    if not process:
        raise BuildError("target process id is required to send a message")
    return build_data_item(
        target=process, anchor=anchor, data=data, tags=message_tags(tags)
    )


def _signature_type_for(signature: bytes, owner: bytes) -> int | None:
    for signature_type, (sig_len, owner_len) in SIGNATURE_LENGTHS.items():
        if len(signature) == sig_len and len(owner) == owner_len:
            return signature_type
    return None


def sign_data_item(item: DataItem, signer) -> DataItem:
    """Sign *item* in place with *signer* and assign its id.

    Returns:
        The same item, now signed.

    Raises:
        SignerError: If there is no signer, the signer fails, or it returns
            a signature/owner pair of no known signature type.
    """
    if signer is None:
        raise SignerError("A signer is required to sign a data item")
    if item.is_signed:
        raise SignerError("Data item is already signed")

    try:
        signature, owner = signer.sign(item)
    except SignerError:
        raise
    except Exception as e:
        raise SignerError(f"Signer rejected data item: {e}") from e

    if not isinstance(signature, (bytes, bytearray)) or not isinstance(owner, str):
        raise SignerError("Signer must return (signature bytes, owner string)")
    try:
        owner_bytes = b64url_decode(owner)
    except ValueError as e:
        raise SignerError(f"Signer owner is not base64url: {e}") from e

    signature_type = _signature_type_for(signature, owner_bytes)
    if signature_type is None:
        raise SignerError(
            f"Unsupported signature shape: {len(signature)}-byte signature, "
            f"{len(owner_bytes)}-byte owner"
        )

    item.signature = bytes(signature)
    item.owner = owner
    item.signature_type = signature_type
    item.id = b64url_encode(hashlib.sha256(item.signature).digest())
    _LOG.debug("signed data item id=%s type=%s", item.id, signature_type)
    return item
