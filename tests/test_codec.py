import json

import pytest

from jsonsettings import codec
from jsonsettings.ciphers import Argon2AESGCM, CipherStrategy, LegacyAESCBC, default_registry, evp_bytes_to_key
from jsonsettings.config import DEFAULTS, merge
from jsonsettings.errors import CryptoError, ParseError, SerializationError

FAST_KDF = {"time_cost": 1, "memory_cost_kb": 8, "parallelism": 1}


def test_compact_and_pretty_output():
    reg = default_registry()
    doc = {"foo": {"bar": [1, 2]}, "ü": "é"}
    compact = codec.encode(doc, DEFAULTS, reg)
    assert compact == '{"foo":{"bar":[1,2]},"ü":"é"}'.encode("utf-8")

    pretty = codec.encode(doc, merge(DEFAULTS, {"prettify": True, "num_spaces": 2}), reg)
    assert pretty == json.dumps(doc, indent=2, ensure_ascii=False).encode("utf-8")

    # prettify with zero spaces is still compact
    assert codec.encode(doc, merge(DEFAULTS, {"prettify": True}), reg) == compact


def test_decode_errors():
    reg = default_registry()
    with pytest.raises(ParseError):
        codec.decode(b"{not valid json", DEFAULTS, reg)
    with pytest.raises(ParseError):
        codec.decode(b"\xff\xfe\x00", DEFAULTS, reg)


def test_unserializable_values():
    reg = default_registry()
    with pytest.raises(SerializationError):
        codec.encode({"s": {1, 2}}, DEFAULTS, reg)
    with pytest.raises(SerializationError):
        codec.encode({"f": float("nan")}, DEFAULTS, reg)


def test_evp_bytes_to_key_first_block_is_md5_of_password():
    key, iv = evp_bytes_to_key(b"password", 32, 16)
    assert key[:16].hex() == "5f4dcc3b5aa765d61d8327deb882cf99"
    assert len(key) == 32 and len(iv) == 16
    key128, iv128 = evp_bytes_to_key(b"password", 16, 16)
    assert key128 == key[:16]
    assert iv128 == key[16:]


def test_legacy_cbc_matches_openssl_passphrase_output():
    # printf '{"a":"b"}' | openssl enc -aes-<bits>-cbc -md md5 -nosalt -k secret
    assert LegacyAESCBC(256).encrypt(b'{"a":"b"}', "secret").hex() == "29251459084e046bbded0ab61b96c940"
    assert LegacyAESCBC(128).encrypt(b'{"a":"b"}', "secret").hex() == "e5fee76346066efc125f6ea09bc5cfaa"
    assert LegacyAESCBC(256).decrypt(bytes.fromhex("29251459084e046bbded0ab61b96c940"), "secret") == b'{"a":"b"}'


def test_legacy_cbc_roundtrip_and_wrong_key():
    c = LegacyAESCBC(256)
    enc = c.encrypt(b'{"a":"b"}', "secret")
    assert len(enc) % 16 == 0
    assert c.decrypt(enc, "secret") == b'{"a":"b"}'
    with pytest.raises(CryptoError):
        c.decrypt(enc[:-1], "secret")


def test_encoded_document_is_encrypted():
    reg = default_registry()
    cfg = merge(DEFAULTS, {"encryption_key": "k3y"})
    enc = codec.encode({"a": "b"}, cfg, reg)
    with pytest.raises(ValueError):
        json.loads(enc)
    assert codec.decode(enc, cfg, reg) == {"a": "b"}


def test_gcm_roundtrip_and_tamper_detection():
    c = Argon2AESGCM(FAST_KDF)
    enc = c.encrypt(b"hello", "master")
    assert enc != c.encrypt(b"hello", "master")  # random salt and nonce
    assert c.decrypt(enc, "master") == b"hello"

    with pytest.raises(CryptoError):
        c.decrypt(enc, "wrong")
    tampered = bytearray(enc)
    tampered[-1] ^= 0xFF
    with pytest.raises(CryptoError):
        c.decrypt(bytes(tampered), "master")
    with pytest.raises(CryptoError):
        c.decrypt(b"not ours", "master")


def test_unknown_algorithm():
    reg = default_registry()
    cfg = merge(DEFAULTS, {"encryption_key": "k", "encryption_algorithm": "rot13"})
    with pytest.raises(CryptoError):
        codec.encode({}, cfg, reg)
    assert "aes-256-cbc" in reg.algorithms()


def test_indent_is_capped_at_ten_spaces():
    reg = default_registry()
    cfg = merge(DEFAULTS, {"prettify": True, "num_spaces": 12})
    assert cfg.indent == 10
    assert codec.encode({"a": 1}, cfg, reg) == b'{\n          "a": 1\n}'


class _XorStrategy:
    def encrypt(self, plaintext: bytes, key: str) -> bytes:
        return bytes(b ^ 0x5A for b in plaintext)

    def decrypt(self, data: bytes, key: str) -> bytes:
        return bytes(b ^ 0x5A for b in data)


def test_custom_cipher_strategy_is_used_by_name():
    reg = default_registry()
    strategy: CipherStrategy = _XorStrategy()
    reg.register("XOR-Test", strategy)
    assert reg.get("xor-test") is strategy
    cfg = merge(DEFAULTS, {"encryption_key": "k", "encryption_algorithm": "xor-test"})
    enc = codec.encode({"a": 1}, cfg, reg)
    assert enc == bytes(b ^ 0x5A for b in b'{"a":1}')
    assert codec.decode(enc, cfg, reg) == {"a": 1}
