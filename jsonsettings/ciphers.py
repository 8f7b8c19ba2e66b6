"""
jsonsettings.ciphers

Encryption strategies keyed by algorithm name.

- aes-128-cbc / aes-192-cbc / aes-256-cbc: legacy passphrase format
  (OpenSSL EVP_BytesToKey with MD5, no salt) kept for file compatibility.
- argon2id-aes-256-gcm: Argon2id KDF + AES-GCM with random salt and nonce.
"""

import hashlib
import os
import struct
from typing import Dict, List, Optional, Protocol, Tuple

from argon2 import low_level
from argon2.exceptions import HashingError
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import CryptoError

# Default KDF params (tunable). Balance security/performance.
DEFAULT_KDF_PARAMS = {
    "time_cost": 3,        # iterations
    "memory_cost_kb": 65536,  # 64 MB
    "parallelism": 2,
    "hash_len": 32
}

GCM_MAGIC = b"JSGCM1"
_GCM_HEADER = struct.Struct(">IIB")
_SALT_LEN = 16
_NONCE_LEN = 12


class CipherStrategy(Protocol):
    def encrypt(self, plaintext: bytes, key: str) -> bytes: ...

    def decrypt(self, data: bytes, key: str) -> bytes: ...


def evp_bytes_to_key(password: bytes, key_len: int, iv_len: int) -> Tuple[bytes, bytes]:
    """
    OpenSSL EVP_BytesToKey (MD5, count=1, no salt), the derivation behind
    the legacy passphrase ciphers.
    """
    derived = b""
    block = b""
    while len(derived) < key_len + iv_len:
        block = hashlib.md5(block + password).digest()
        derived += block
    return derived[:key_len], derived[key_len:key_len + iv_len]


class LegacyAESCBC:
    """AES-CBC with PKCS#7 padding, key and IV derived from the passphrase."""

    block_size = 128

    def __init__(self, key_bits: int = 256):
        if key_bits not in (128, 192, 256):
            raise ValueError("key_bits must be 128, 192 or 256")
        self.key_len = key_bits // 8

    def _cipher(self, key: str) -> Cipher:
        k, iv = evp_bytes_to_key(key.encode("utf-8"), self.key_len, 16)
        return Cipher(algorithms.AES(k), modes.CBC(iv))

    def encrypt(self, plaintext: bytes, key: str) -> bytes:
        padder = padding.PKCS7(self.block_size).padder()
        padded = padder.update(plaintext) + padder.finalize()
        enc = self._cipher(key).encryptor()
        return enc.update(padded) + enc.finalize()

    def decrypt(self, data: bytes, key: str) -> bytes:
        dec = self._cipher(key).decryptor()
        try:
            padded = dec.update(data) + dec.finalize()
            unpadder = padding.PKCS7(self.block_size).unpadder()
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            # wrong key or corrupted data; both show up as bad length or padding
            raise CryptoError("Decryption failed (wrong key or corrupted data)") from e


def _derive_key(password: str, salt: bytes, params: Dict[str, int]) -> bytes:
    """
    Derive a raw key using Argon2id low-level API.
    """
    return low_level.hash_secret_raw(
        secret=password.encode("utf-8"),
        salt=salt,
        time_cost=int(params.get("time_cost", DEFAULT_KDF_PARAMS["time_cost"])),
        memory_cost=int(params.get("memory_cost_kb", DEFAULT_KDF_PARAMS["memory_cost_kb"])),
        parallelism=int(params.get("parallelism", DEFAULT_KDF_PARAMS["parallelism"])),
        hash_len=DEFAULT_KDF_PARAMS["hash_len"],
        type=low_level.Type.ID
    )


class Argon2AESGCM:
    """
    Output layout:
        magic | time_cost (u32) | memory_cost_kb (u32) | parallelism (u8) | salt | nonce | ciphertext+tag
    """

    def __init__(self, kdf_params: Optional[Dict[str, int]] = None):
        self.kdf_params = dict(DEFAULT_KDF_PARAMS)
        self.kdf_params.update(kdf_params or {})

    def encrypt(self, plaintext: bytes, key: str) -> bytes:
        kdf = self.kdf_params
        salt = os.urandom(_SALT_LEN)
        nonce = os.urandom(_NONCE_LEN)
        aesgcm = AESGCM(_derive_key(key, salt, kdf))
        ciphertext = aesgcm.encrypt(nonce, plaintext, None)  # associated data None
        header = _GCM_HEADER.pack(kdf["time_cost"], kdf["memory_cost_kb"], kdf["parallelism"])
        return GCM_MAGIC + header + salt + nonce + ciphertext

    def decrypt(self, data: bytes, key: str) -> bytes:
        if not data.startswith(GCM_MAGIC):
            raise CryptoError("Invalid encrypted settings format: missing header")
        offset = len(GCM_MAGIC)
        try:
            time_cost, memory_cost_kb, parallelism = _GCM_HEADER.unpack_from(data, offset)
        except struct.error as e:
            raise CryptoError("Invalid encrypted settings format: truncated header") from e
        offset += _GCM_HEADER.size
        salt = data[offset:offset + _SALT_LEN]
        nonce = data[offset + _SALT_LEN:offset + _SALT_LEN + _NONCE_LEN]
        ciphertext = data[offset + _SALT_LEN + _NONCE_LEN:]
        if len(salt) != _SALT_LEN or len(nonce) != _NONCE_LEN:
            raise CryptoError("Invalid encrypted settings format: truncated salt or nonce")
        params = {
            "time_cost": time_cost,
            "memory_cost_kb": memory_cost_kb,
            "parallelism": parallelism,
        }
        try:
            aesgcm = AESGCM(_derive_key(key, salt, params))
            return aesgcm.decrypt(nonce, ciphertext, None)
        except (InvalidTag, HashingError, ValueError) as e:
            # Could be wrong key, tampered ciphertext, or bad params
            raise CryptoError("Incorrect encryption key or corrupted settings file") from e


class CipherRegistry:
    """Maps algorithm names to ciphers and dispatches encrypt/decrypt."""

    def __init__(self) -> None:
        self._ciphers: Dict[str, CipherStrategy] = {}

    def register(self, name: str, cipher: CipherStrategy) -> None:
        self._ciphers[name.lower()] = cipher

    def get(self, name: str) -> CipherStrategy:
        try:
            return self._ciphers[name.lower()]
        except KeyError:
            raise CryptoError("Unsupported encryption algorithm: %s" % name) from None

    def algorithms(self) -> List[str]:
        return sorted(self._ciphers)

    def encrypt(self, plaintext: bytes, key: str, algorithm: str) -> bytes:
        return self.get(algorithm).encrypt(plaintext, key)

    def decrypt(self, data: bytes, key: str, algorithm: str) -> bytes:
        return self.get(algorithm).decrypt(data, key)


def default_registry() -> CipherRegistry:
    reg = CipherRegistry()
    for bits in (128, 192, 256):
        reg.register("aes-%d-cbc" % bits, LegacyAESCBC(bits))
    reg.register("argon2id-aes-256-gcm", Argon2AESGCM())
    return reg
