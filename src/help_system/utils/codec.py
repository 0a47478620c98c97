"""Wrapping of group article content.

A codec turns plain text into base64 text and back. The initialization vector
comes from the article's 64-bit unique ID, so a stored row carries everything
needed to unwrap it apart from the key.
"""

import base64
import binascii
import hashlib
import logging
import os
from typing import Optional, Protocol

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from help_system.config import GROUP_CODEC_KEY
from help_system.core.exceptions import CodecFailureError

logger = logging.getLogger(__name__)

IV_SIZE = 16


def iv_from_unique_id(unique_id: int) -> bytes:
    """Derive a 16 byte IV from a signed 64-bit unique ID."""
    raw = unique_id.to_bytes(8, "big", signed=True)
    return hashlib.sha256(raw).digest()[:IV_SIZE]


class Codec(Protocol):
    def wrap(self, plaintext: str, iv: bytes) -> str:
        ...

    def unwrap(self, ciphertext: str, iv: bytes) -> str:
        ...


class AesCodec:
    """AES-256-CBC with PKCS7 padding."""

    def __init__(self, key: bytes):
        if len(key) != 32:
            raise CodecFailureError("Codec key must be 32 bytes")
        self._key = key

    @classmethod
    def from_encoded_key(cls, encoded: str) -> "AesCodec":
        """Build a codec from a url-safe base64 key."""
        try:
            key = base64.urlsafe_b64decode(encoded.encode("ascii"))
        except (binascii.Error, ValueError) as e:
            raise CodecFailureError(f"Codec key is not valid base64: {e}") from e
        return cls(key)

    @staticmethod
    def generate_key() -> str:
        return base64.urlsafe_b64encode(os.urandom(32)).decode("ascii")

    def _cipher(self, iv: bytes) -> Cipher:
        if len(iv) != IV_SIZE:
            raise CodecFailureError(f"IV must be {IV_SIZE} bytes")
        return Cipher(algorithms.AES(self._key), modes.CBC(iv))

    def wrap(self, plaintext: str, iv: bytes) -> str:
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
        encryptor = self._cipher(iv).encryptor()
        data = encryptor.update(padded) + encryptor.finalize()
        return base64.b64encode(data).decode("ascii")

    def unwrap(self, ciphertext: str, iv: bytes) -> str:
        try:
            data = base64.b64decode(ciphertext.encode("ascii"), validate=True)
            decryptor = self._cipher(iv).decryptor()
            padded = decryptor.update(data) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plain = unpadder.update(padded) + unpadder.finalize()
            return plain.decode("utf-8")
        except CodecFailureError:
            raise
        except (binascii.Error, ValueError, UnicodeError) as e:
            raise CodecFailureError(f"Cannot unwrap content: {e}") from e


def get_default_codec() -> Optional[Codec]:
    """Return the codec configured by GROUP_CODEC_KEY, or None."""
    if not GROUP_CODEC_KEY:
        logger.warning("GROUP_CODEC_KEY not set; group article bodies will be stored in plain text.")
        return None
    return AesCodec.from_encoded_key(GROUP_CODEC_KEY)
