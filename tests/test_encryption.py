from decimal import Decimal

import pytest
from cryptography.fernet import Fernet

from edushield.core.encryption import EncryptionService
from edushield.core.exceptions import InternalError


def test_decimal_values_are_normalised_to_two_places():
    service = EncryptionService()
    token = service.encrypt_decimal(Decimal("12.345"))

    assert "12.3" not in token
    assert service.decrypt_decimal(token) == Decimal("12.35")


def test_empty_cipher_text_decrypts_to_zero():
    assert EncryptionService().decrypt_decimal(None) == Decimal("0.00")
    assert EncryptionService().decrypt_decimal("") == Decimal("0.00")


def test_value_from_another_key_is_rejected():
    other = EncryptionService(Fernet.generate_key())
    token = other.encrypt("42.00")

    with pytest.raises(InternalError):
        EncryptionService().decrypt(token)


def test_derived_key_is_stable():
    assert EncryptionService.derive_key("secret") == EncryptionService.derive_key("secret")
    assert EncryptionService.derive_key("secret") != EncryptionService.derive_key("other")
