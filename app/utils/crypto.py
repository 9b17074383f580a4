"""AES-256-GCM envelope encryption for sensitive applicant fields"""
import base64
import binascii
import os
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from app.config import settings

NONCE_BYTES = 16
TAG_BYTES = 16
KEY_BYTES = 32


class ConfigurationError(RuntimeError):
    """A required secret is missing or malformed"""


class FieldDecryptionError(ValueError):
    """An envelope could not be parsed, decoded or authenticated"""


def _load_key(raw: Optional[str] = None) -> bytes:
    raw = raw if raw is not None else settings.SSN_ENCRYPTION_KEY
    if not raw:
        raise ConfigurationError("SSN_ENCRYPTION_KEY is not configured")
    try:
        key = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConfigurationError("SSN_ENCRYPTION_KEY is not valid base64") from exc
    if len(key) != KEY_BYTES:
        raise ConfigurationError(f"SSN_ENCRYPTION_KEY must decode to exactly {KEY_BYTES} bytes")
    return key


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def encrypt_field(plain: str, key: Optional[str] = None) -> str:
    """Encrypt ``plain`` and return ``b64(nonce):b64(tag):b64(ciphertext)``.

    A fresh 16-byte nonce is drawn for every call, so encrypting the same value
    twice yields different envelopes.

    Raises:
        ConfigurationError: the key is missing or not 32 bytes.
    """
    aesgcm = AESGCM(_load_key(key))
    nonce = os.urandom(NONCE_BYTES)
    sealed = aesgcm.encrypt(nonce, plain.encode("utf-8"), None)
    ciphertext, tag = sealed[:-TAG_BYTES], sealed[-TAG_BYTES:]
    return f"{_b64(nonce)}:{_b64(tag)}:{_b64(ciphertext)}"


def decrypt_field(envelope: str, key: Optional[str] = None) -> str:
    """Reverse :func:`encrypt_field`.

    Raises:
        ConfigurationError: the key is missing or not 32 bytes.
        FieldDecryptionError: the envelope is malformed or fails authentication.
    """
    aesgcm = AESGCM(_load_key(key))

    parts = envelope.split(":")
    if len(parts) != 3:
        raise FieldDecryptionError("Invalid encrypted data format")

    try:
        nonce, tag, ciphertext = (base64.b64decode(part, validate=True) for part in parts)
    except (binascii.Error, ValueError) as exc:
        raise FieldDecryptionError("Invalid encrypted data encoding") from exc

    if len(nonce) != NONCE_BYTES or len(tag) != TAG_BYTES:
        raise FieldDecryptionError("Invalid encrypted data format")

    try:
        plain = aesgcm.decrypt(nonce, ciphertext + tag, None)
    except InvalidTag as exc:
        raise FieldDecryptionError("Encrypted data failed authentication") from exc

    try:
        return plain.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FieldDecryptionError("Decrypted data is not valid text") from exc


def mask_ssn(value: Optional[str]) -> str:
    """Display form of an SSN: ``****1234``, or ``********`` for envelopes and short values"""
    if not value or ":" in value or len(value) < 4:
        return "********"
    return f"****{value[-4:]}"


def format_ssn(digits: str) -> str:
    """Render nine digits as ``XXX-XX-XXXX``; other values are returned unchanged"""
    if len(digits) == 9 and digits.isdigit():
        return f"{digits[:3]}-{digits[3:5]}-{digits[5:]}"
    return digits
