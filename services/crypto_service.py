# warung/services/crypto_service.py

from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from domain.errors import ObfuscationError


class NameCipher:
    """
    Reversible encryption of the customer name column.

    The key stays out of source and out of the DB. Provide it via env:
      CUSTOMER_NAME_KEY = <base64 urlsafe 32-byte key>

    Generate one with:
      python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
    """

    def __init__(self, key: Optional[str]):
        key = (key or "").strip()
        if not key:
            raise ObfuscationError("CUSTOMER_NAME_KEY is not configured")
        try:
            self._fernet = Fernet(key.encode("utf-8"))
        except (ValueError, TypeError):
            raise ObfuscationError("invalid CUSTOMER_NAME_KEY") from None

    def encrypt(self, name: str) -> str:
        try:
            token = self._fernet.encrypt(name.encode("utf-8"))
        except (AttributeError, TypeError) as e:
            raise ObfuscationError(f"failed to encrypt customer name: {e}") from e
        return token.decode("utf-8")

    def decrypt(self, token: str) -> str:
        try:
            raw = self._fernet.decrypt(token.encode("utf-8"))
            return raw.decode("utf-8")
        except (InvalidToken, AttributeError, UnicodeDecodeError):
            raise ObfuscationError("failed to decrypt customer name") from None
