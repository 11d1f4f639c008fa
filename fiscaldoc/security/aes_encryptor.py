import base64
import binascii

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from fiscaldoc.config.settings import Settings
from fiscaldoc.security.base import BaseEncryptor
from fiscaldoc.security.exceptions import EncryptionError


class AesEncryptor(BaseEncryptor):
    """AES-256-CBC with PKCS7 padding under one fixed key/IV pair, base64 output."""

    KEY_LENGTH = 32
    IV_LENGTH = 16

    def __init__(self, key: str, iv: str) -> None:
        key_bytes = key.encode("utf-8")
        iv_bytes = iv.encode("utf-8")
        if len(key_bytes) != self.KEY_LENGTH:
            raise ValueError(f"Encryption key must be {self.KEY_LENGTH} bytes, got {len(key_bytes)}")
        if len(iv_bytes) != self.IV_LENGTH:
            raise ValueError(f"Encryption IV must be {self.IV_LENGTH} bytes, got {len(iv_bytes)}")
        self._cipher = Cipher(algorithms.AES(key_bytes), modes.CBC(iv_bytes))

    @classmethod
    def from_settings(cls, settings: Settings) -> "AesEncryptor":
        return cls(settings.encryption_key, settings.encryption_iv)

    def encrypt(self, plaintext: str) -> str:
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
        encryptor = self._cipher.encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return base64.b64encode(ciphertext).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        try:
            raw = base64.b64decode(ciphertext, validate=True)
            decryptor = self._cipher.decryptor()
            padded = decryptor.update(raw) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            return plaintext.decode("utf-8")
        except (binascii.Error, ValueError) as exc:
            raise EncryptionError(f"Unable to decrypt payload: {exc}") from exc
