"""Field-level encryption for monetary amounts and exam scores."""

import base64
import hashlib
import logging
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken

from edushield.core.config import settings
from edushield.core.exceptions import InternalError

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


class EncryptionService:
    """Reversible cipher for values stored in `encrypted_*` columns."""

    def __init__(self, key: str | bytes | None = None):
        key = key or settings.ENCRYPTION_KEY or self.derive_key(settings.JWT_SECRET_KEY)
        if isinstance(key, str):
            key = key.encode("utf-8")
        self._fernet = Fernet(key)

    @staticmethod
    def derive_key(secret: str) -> bytes:
        """Derive a Fernet key from an arbitrary secret string."""
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        return base64.urlsafe_b64encode(digest)

    def encrypt(self, plain_text: str) -> str:
        return self._fernet.encrypt(plain_text.encode("utf-8")).decode("utf-8")

    def decrypt(self, cipher_text: str) -> str:
        try:
            return self._fernet.decrypt(cipher_text.encode("utf-8")).decode("utf-8")
        except InvalidToken:
            logger.error("Failed to decrypt field value")
            raise InternalError("Failed to decrypt stored value")

    def encrypt_decimal(self, value: Decimal | float | int) -> str:
        """Encrypt a number, normalised to two decimal places."""
        amount = Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
        return self.encrypt(f"{amount:.2f}")

    def decrypt_decimal(self, cipher_text: str | None) -> Decimal:
        if not cipher_text:
            return Decimal("0.00")
        return Decimal(self.decrypt(cipher_text))


@lru_cache
def get_encryption_service() -> EncryptionService:
    """Get cached encryption service instance."""
    return EncryptionService()
