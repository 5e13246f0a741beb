import logging
from typing import Optional
from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)

ENCRYPTED_PREFIX = "enc:"

class DataEncryptor:
    """
    Encrypts credentials before they are written to disk.
    Uses Fernet (symmetric encryption). Encrypted values carry an "enc:" prefix
    so plaintext written before a key was configured still loads.
    """
    def __init__(self, key: str):
        self.fernet = Fernet(key)

    @staticmethod
    def generate_key() -> str:
        return Fernet.generate_key().decode()

    def encrypt(self, text: Optional[str]) -> Optional[str]:
        if not text or text.startswith(ENCRYPTED_PREFIX):
            return text
        return ENCRYPTED_PREFIX + self.fernet.encrypt(text.encode()).decode()

    def decrypt(self, token: Optional[str]) -> Optional[str]:
        if not token or not token.startswith(ENCRYPTED_PREFIX):
            return token
        try:
            return self.fernet.decrypt(token[len(ENCRYPTED_PREFIX):].encode()).decode()
        except InvalidToken:
            logger.error("Could not decrypt a stored credential, was the encryption key changed?")
            return token
