"""AES-GCM text encryption for stored calculation history."""

from __future__ import annotations

import base64
import binascii
import os
import threading
import uuid
from pathlib import Path

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

_NONCE_BYTES = 12
_KEY_BITS = 256
_KEY_LENGTHS = frozenset({16, 24, 32})


class CipherError(ValueError):
    """Raised when a token cannot be decrypted with the current key."""


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(text: str) -> bytes:
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise CipherError("Cipher text is not valid base64") from exc


def write_private_text(path: Path, text: str) -> None:
    """Atomically replace ``path`` with ``text``, readable by the owner only."""

    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
    fd = os.open(temp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(temp_path, path)
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise


class TextCipher:
    """Encrypt text as ``"<nonce b64>:<ciphertext b64>"``.

    The key is created on first use and stored base64 encoded at ``key_path``;
    without a path it only lives for the lifetime of the instance.
    """

    def __init__(self, key_path: Path | None = None) -> None:
        self.key_path = Path(key_path) if key_path else None
        self._key: bytes | None = None
        self._lock = threading.Lock()

    def _write_key(self, key: bytes) -> None:
        if self.key_path is not None:
            write_private_text(self.key_path, _b64encode(key))

    def _key_locked(self) -> bytes:
        if self._key is None:
            if self.key_path is not None and self.key_path.exists():
                key = _b64decode(self.key_path.read_text(encoding="utf-8").strip())
                if len(key) not in _KEY_LENGTHS:
                    raise CipherError(f"Key file {self.key_path.name} does not hold a valid AES key")
                self._key = key
            else:
                self._key = AESGCM.generate_key(bit_length=_KEY_BITS)
                self._write_key(self._key)
        return self._key

    def encrypt(self, plain_text: str) -> str:
        with self._lock:
            key = self._key_locked()
        nonce = os.urandom(_NONCE_BYTES)
        cipher_text = AESGCM(key).encrypt(nonce, plain_text.encode("utf-8"), None)
        return f"{_b64encode(nonce)}:{_b64encode(cipher_text)}"

    def decrypt(self, token: str) -> str:
        nonce_b64, _, cipher_b64 = token.strip().partition(":")
        if not nonce_b64 or not cipher_b64:
            raise CipherError("Invalid cipher text")
        with self._lock:
            key = self._key_locked()
        try:
            plain = AESGCM(key).decrypt(_b64decode(nonce_b64), _b64decode(cipher_b64), None)
        except (InvalidTag, ValueError) as exc:
            raise CipherError("Cipher text could not be decrypted") from exc
        return plain.decode("utf-8")

    def successor(self) -> TextCipher:
        """Return a cipher for the same key file holding a fresh, unsaved key."""

        fresh = TextCipher(self.key_path)
        fresh._key = AESGCM.generate_key(bit_length=_KEY_BITS)
        return fresh

    def adopt(self, other: TextCipher) -> None:
        """Persist ``other``'s key and switch to it."""

        key = other._key
        if key is None:
            raise CipherError("Cannot adopt a cipher without a key")
        with self._lock:
            self._write_key(key)
            self._key = key

    def rotate(self) -> None:
        """Replace the key with a freshly generated one."""

        self.adopt(self.successor())

    def reset(self) -> None:
        """Forget the key; the next operation generates a new one."""

        with self._lock:
            self._key = None
            if self.key_path is not None:
                self.key_path.unlink(missing_ok=True)


__all__ = ["CipherError", "TextCipher", "write_private_text"]
