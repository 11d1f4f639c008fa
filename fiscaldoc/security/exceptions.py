class EncryptionError(Exception):
    """Raised when a payload cannot be encrypted or decrypted."""
