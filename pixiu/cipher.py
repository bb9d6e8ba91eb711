"""AES-128-CBC encryption of stored secrets such as kubeconfig data."""

from __future__ import annotations

import base64
import binascii

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

AES_KEY = b"KHGSI69YBWGS0TWX"
AES_IV = b"3010201735544643"
_BLOCK_SIZE = 16


def _cipher() -> Cipher:
    return Cipher(algorithms.AES(AES_KEY), modes.CBC(AES_IV))


def _pad(data: bytes) -> bytes:
    padding = _BLOCK_SIZE - len(data) % _BLOCK_SIZE
    return data + bytes([padding]) * padding


def _unpad(data: bytes) -> bytes:
    padding = data[-1]
    if padding > len(data):
        raise ValueError("invalid padding in decrypted data")
    return data[: len(data) - padding]


def encrypt(data: bytes | str) -> str:
    """Encrypt ``data`` and return the ciphertext as standard base64."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    encryptor = _cipher().encryptor()
    encrypted = encryptor.update(_pad(bytes(data))) + encryptor.finalize()
    return base64.b64encode(encrypted).decode("ascii")


def decrypt(text: str) -> bytes:
    """Decode base64 ``text`` and decrypt it back to the original bytes."""
    try:
        raw = base64.b64decode(text, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"invalid base64 data: {exc}") from exc
    if not raw or len(raw) % _BLOCK_SIZE:
        raise ValueError("ciphertext is not a whole number of blocks")
    decryptor = _cipher().decryptor()
    plain = decryptor.update(raw) + decryptor.finalize()
    return _unpad(plain)