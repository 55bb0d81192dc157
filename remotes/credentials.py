"""
Credential codec for remote share passwords.

Passwords are stored as ``<nonce>:<tag>:<ciphertext>`` hex tokens produced
with AES-256-GCM. The key is derived with scrypt from a shared secret and a
fixed salt, so any process holding the same secret can read the registry.
"""
import logging
import os
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from .errors import DecryptionError, RemoteMountError

logger = logging.getLogger(__name__)


class CredentialCodec:
    """Authenticated, non-deterministic encryption of share passwords."""

    SALT = b"remotes-salt"
    ASSOCIATED_DATA = b"remotes-auth"
    KEY_LENGTH = 32
    NONCE_LENGTH = 16
    TAG_LENGTH = 16
    DELIMITER = ":"

    # scrypt cost parameters
    SCRYPT_N = 2 ** 14
    SCRYPT_R = 8
    SCRYPT_P = 1

    def __init__(self, secret: Optional[str]):
        self._secret = secret

    def _derive_key(self) -> bytes:
        if not self._secret:
            raise RemoteMountError("Credential secret is not configured")
        kdf = Scrypt(
            salt=self.SALT,
            length=self.KEY_LENGTH,
            n=self.SCRYPT_N,
            r=self.SCRYPT_R,
            p=self.SCRYPT_P,
        )
        return kdf.derive(self._secret.encode("utf-8"))

    def encrypt(self, plaintext: Optional[str]) -> str:
        """
        Encrypt a password into a self-contained token.

        Args:
            plaintext: Password to encrypt; empty or None means guest access

        Returns:
            Token string, or an empty string for an empty password
        """
        if not plaintext:
            return ""

        nonce = os.urandom(self.NONCE_LENGTH)
        sealed = AESGCM(self._derive_key()).encrypt(
            nonce, plaintext.encode("utf-8"), self.ASSOCIATED_DATA
        )
        ciphertext, tag = sealed[:-self.TAG_LENGTH], sealed[-self.TAG_LENGTH:]
        return self.DELIMITER.join((nonce.hex(), tag.hex(), ciphertext.hex()))

    def decrypt(self, token: Optional[str]) -> str:
        """
        Decrypt a token produced by :meth:`encrypt`.

        Raises:
            DecryptionError: If the token is malformed, tampered with, or was
                sealed under a different secret
        """
        if not token:
            return ""

        parts = token.split(self.DELIMITER)
        if len(parts) != 3 or not all(parts):
            raise DecryptionError("Failed to decrypt password: invalid encrypted password format")

        try:
            nonce, tag, ciphertext = (bytes.fromhex(part) for part in parts)
        except ValueError as exc:
            raise DecryptionError(f"Failed to decrypt password: {exc}") from exc

        if len(nonce) != self.NONCE_LENGTH or len(tag) != self.TAG_LENGTH:
            raise DecryptionError("Failed to decrypt password: invalid nonce or tag length")

        try:
            plaintext = AESGCM(self._derive_key()).decrypt(
                nonce, ciphertext + tag, self.ASSOCIATED_DATA
            )
        except InvalidTag as exc:
            logger.warning("Rejected credential token with bad authentication tag")
            raise DecryptionError("Failed to decrypt password: authentication failed") from exc

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecryptionError(f"Failed to decrypt password: {exc}") from exc
