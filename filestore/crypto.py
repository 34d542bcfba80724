"""At-rest record encryption: scrypt key derivation + AES-256-GCM.

Sealed records are JSON envelopes `{version, salt, iv, tag, data}` with
hex-encoded salt/iv/tag and base64 ciphertext.
"""
import base64
import hashlib
import json
import os
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

ENVELOPE_VERSION = 1
KEY_LEN = 32
SALT_LEN = 16
IV_LEN = 12
TAG_LEN = 16
SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1


class SealError(ValueError):
    """Envelope is malformed or the password does not open it."""


def _derive_key(password: str, salt: bytes) -> bytes:
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt,
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=KEY_LEN,
    )


def seal(data: bytes, password: str) -> bytes:
    """Encrypt `data` and return the serialized envelope."""
    salt = os.urandom(SALT_LEN)
    iv = os.urandom(IV_LEN)
    sealed = AESGCM(_derive_key(password, salt)).encrypt(iv, data, None)
    envelope = {
        "version": ENVELOPE_VERSION,
        "salt": salt.hex(),
        "iv": iv.hex(),
        "tag": sealed[-TAG_LEN:].hex(),
        "data": base64.b64encode(sealed[:-TAG_LEN]).decode("ascii"),
    }
    return json.dumps(envelope).encode("utf-8")


def unseal(blob: bytes, password: str) -> bytes:
    """Decrypt an envelope produced by `seal`."""
    try:
        envelope = json.loads(blob.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SealError("Not an encrypted record") from e
    if not is_envelope(envelope):
        raise SealError("Not an encrypted record")

    salt = bytes.fromhex(envelope["salt"])
    iv = bytes.fromhex(envelope["iv"])
    tag = bytes.fromhex(envelope["tag"])
    for name, value, expected in (("salt", salt, SALT_LEN), ("iv", iv, IV_LEN), ("tag", tag, TAG_LEN)):
        if len(value) != expected:
            raise SealError(f"Invalid {name} length: expected {expected}, got {len(value)}")

    ciphertext = base64.b64decode(envelope["data"]) + tag
    try:
        return AESGCM(_derive_key(password, salt)).decrypt(iv, ciphertext, None)
    except InvalidTag as e:
        raise SealError("Wrong password or corrupted record") from e


def is_envelope(obj: Any) -> bool:
    if not isinstance(obj, dict):
        return False
    return obj.get("version") == ENVELOPE_VERSION and all(
        isinstance(obj.get(field), str) for field in ("salt", "iv", "tag", "data")
    )
