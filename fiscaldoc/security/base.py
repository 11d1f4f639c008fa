from abc import ABC, abstractmethod


class BaseEncryptor(ABC):
    """Contract for reversible, deterministic payload encryption."""

    @abstractmethod
    def encrypt(self, plaintext: str) -> str:
        """Encrypt text; the same plaintext always yields the same ciphertext."""

    @abstractmethod
    def decrypt(self, ciphertext: str) -> str:
        """Return the exact plaintext that produced ``ciphertext``.

        Raises:
            EncryptionError: if the ciphertext is not valid for this key.
        """
