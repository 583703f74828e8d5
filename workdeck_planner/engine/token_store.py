"""
Workdeck Planner Token Store — Durable key/value storage for the bearer token.

The browser page keeps the token in ``localStorage`` under ``workdeck_token``;
the CLI and any other Python caller use this store instead: a small JSON file
whose values are Fernet-encrypted (AES-128-CBC + HMAC-SHA256).

The Fernet key is the SHA-256 digest of the WORKDECK_SECRET_KEY env var
(or the dev default), url-safe base64 encoded.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

from cryptography.fernet import Fernet, InvalidToken

from workdeck_planner.engine.config import TOKEN_STORAGE_KEY

logger = logging.getLogger("workdeck_planner.engine.token_store")

_DEFAULT_SECRET_KEY = "workdeck-planner-dev-key-change-me"


class TokenStore:
    """
    Load/save/clear the Workdeck bearer token.

    Usage:
        store = TokenStore("~/.workdeck/storage.json")
        store.save("eyJhbGciOi...")
        store.load()   # → "eyJhbGciOi..."
    """

    def __init__(
        self,
        path: str | Path,
        key: str = TOKEN_STORAGE_KEY,
        secret_key: Optional[str] = None,
    ):
        self._path = Path(path).expanduser()
        self._key = key
        self._fernet = self._build_fernet(secret_key)

    @staticmethod
    def _build_fernet(secret_key: Optional[str] = None) -> Fernet:
        key_source = (
            os.environ.get("WORKDECK_SECRET_KEY")
            or secret_key
            or _DEFAULT_SECRET_KEY
        )
        derived = hashlib.sha256(key_source.encode("utf-8")).digest()
        return Fernet(base64.urlsafe_b64encode(derived))

    @property
    def path(self) -> Path:
        return self._path

    @property
    def key(self) -> str:
        return self._key

    def _read_all(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError:
            logger.warning(f"Token storage at {self._path} is corrupted; ignoring it")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: Dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        try:
            os.chmod(self._path, 0o600)
        except OSError:
            logger.debug(f"Could not restrict permissions on {self._path}")

    def load(self) -> Optional[str]:
        """Return the stored token, or None if absent or undecryptable."""
        encrypted = self._read_all().get(self._key)
        if not isinstance(encrypted, str) or not encrypted:
            if encrypted:
                logger.warning(f"Stored token under '{self._key}' is not a string; ignoring it")
            return None
        try:
            return self._fernet.decrypt(encrypted.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError):
            logger.warning("Stored token could not be decrypted; the secret key may have changed")
            return None

    def save(self, token: str) -> str:
        """Persist a token (trimmed). Returns the stored value."""
        token = token.strip()
        if not token:
            raise ValueError("Token must not be empty")
        data = self._read_all()
        data[self._key] = self._fernet.encrypt(token.encode("utf-8")).decode("ascii")
        self._write_all(data)
        logger.info(f"Stored Workdeck token under '{self._key}'")
        return token

    def clear(self) -> bool:
        """Remove the token. Returns True if one was stored."""
        data = self._read_all()
        if self._key not in data:
            return False
        del data[self._key]
        self._write_all(data)
        logger.info(f"Cleared Workdeck token '{self._key}'")
        return True


def mask_token(token: Optional[str]) -> str:
    """Render a token for display: first and last four characters only."""
    if not token:
        return "(not set)"
    if len(token) <= 8:
        return "*" * len(token)
    return f"{token[:4]}…{token[-4:]}"
