"""
AES-256-GCM payload encryption for processors that require it.

- key: SHA-256 of the API key (UTF-8) -> 32 bytes
- iv: 12 bytes, configured per processor as base64url
- tag: 128 bit, appended to the ciphertext
- wire: base64url(ciphertext || tag), no padding

A (key, iv) pair belongs to exactly one processor relationship.
"""
import binascii
import hashlib

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from shared.encoding import b64url_decode, b64url_encode
from shared.errors import PayloadDecryptionError

IV_LENGTH_BYTES = 12


class AesGcmEncryptor:

    def __init__(self, api_key: str, iv_base64url: str):
        key = hashlib.sha256(api_key.encode("utf-8")).digest()
        try:
            iv = b64url_decode(iv_base64url)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("IV is not valid base64url") from exc
        if len(iv) != IV_LENGTH_BYTES:
            raise ValueError(f"IV must be {IV_LENGTH_BYTES} bytes, but was {len(iv)} bytes")

        self._aesgcm = AESGCM(key)
        self._iv = iv

    def encrypt(self, plaintext: str) -> str:
        ciphertext_with_tag = self._aesgcm.encrypt(self._iv, plaintext.encode("utf-8"), None)
        return b64url_encode(ciphertext_with_tag)

    def decrypt(self, token: str) -> str:
        try:
            ciphertext_with_tag = b64url_decode(token)
            plaintext = self._aesgcm.decrypt(self._iv, ciphertext_with_tag, None)
        except InvalidTag as exc:
            raise PayloadDecryptionError("Authentication tag mismatch") from exc
        except (binascii.Error, ValueError) as exc:
            raise PayloadDecryptionError("Ciphertext is not valid base64url") from exc
        return plaintext.decode("utf-8")
