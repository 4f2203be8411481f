"""Tests for ed25519 identity management and data item verification."""

import pytest

from aoclient.dataitem import b64url_decode, b64url_encode, build_message_item, sign_data_item
from aoclient.identity import Identity, verify_data_item
from aoclient.errors import IdentityError, SignatureError

PROCESS_ID = b64url_encode(b"\x07" * 32)


class TestIdentityGenerate:
    def test_generate_produces_valid_key(self):
        ident = Identity.generate()
        assert len(ident.public_key_bytes) == 32

    def test_owner_is_unpadded_base64url(self):
        ident = Identity.generate()
        owner = ident.owner
        assert "=" not in owner
        assert "+" not in owner
        assert "/" not in owner
        assert b64url_decode(owner) == ident.public_key_bytes

    def test_two_identities_differ(self):
        a = Identity.generate()
        b = Identity.generate()
        assert a.public_key_bytes != b.public_key_bytes


class TestIdentitySaveLoad:
    def test_round_trip(self, tmp_path):
        path = str(tmp_path / "key")
        orig = Identity.generate()
        orig.save(path)
        loaded = Identity.load(path)
        assert loaded.public_key_bytes == orig.public_key_bytes

    def test_save_creates_parent_dirs(self, tmp_path):
        path = str(tmp_path / "a" / "b" / "key")
        ident = Identity.generate()
        ident.save(path)
        assert Identity.load(path).owner == ident.owner

    def test_load_missing_file_raises(self):
        with pytest.raises(IdentityError, match="not found"):
            Identity.load("/nonexistent/path/key")

    def test_load_wrong_length_raises(self, tmp_path):
        path = tmp_path / "badkey"
        path.write_bytes(b"too short")
        with pytest.raises(IdentityError, match="expected 32 bytes"):
            Identity.load(str(path))

    def test_create_refuses_overwrite(self, tmp_path):
        path = str(tmp_path / "existing.key")
        Identity.create(path)
        with pytest.raises(IdentityError, match="already exists"):
            Identity.create(path)


class TestVerifyDataItem:
    def test_signed_item_verifies(self):
        item = sign_data_item(build_message_item(PROCESS_ID, "ping"), Identity.generate())
        verify_data_item(item)

    def test_tampered_data_fails(self):
        item = sign_data_item(build_message_item(PROCESS_ID, "ping"), Identity.generate())
        item.data = b"pong"
        with pytest.raises(SignatureError):
            verify_data_item(item)

    def test_tampered_owner_fails(self):
        item = sign_data_item(build_message_item(PROCESS_ID, "ping"), Identity.generate())
        item.owner = Identity.generate().owner
        with pytest.raises(SignatureError):
            verify_data_item(item)

    def test_unsigned_item_fails(self):
        with pytest.raises(SignatureError, match="not signed"):
            verify_data_item(build_message_item(PROCESS_ID, "ping"))

    def test_verify_wrong_message(self):
        ident = Identity.generate()
        signature = ident._signing_key.sign(b"correct").signature
        with pytest.raises(SignatureError):
            Identity.verify(ident.public_key_bytes, signature, b"wrong")
