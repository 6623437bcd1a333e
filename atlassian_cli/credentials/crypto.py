"""Machine-bound key derivation and AES-256-GCM sealing.

Security Model:
- The key is derived with PBKDF2-HMAC-SHA256 from a fixed application
  passphrase, salted with the hostname and numeric user id.
- None of these inputs is secret. The passphrase ships with the program
  and the salt is observable by anyone on the machine. What the scheme
  buys is that a copied credentials file cannot be read on another
  machine or by another user, and that the file is opaque to casual
  inspection. It does not protect against code running as the same user,
  which can re-derive the key.
- The passphrase is a deliberate, application-wide constant: the backend
  must work non-interactively, with nothing to prompt for or remember.
- Sealed layout is ``nonce || ciphertext+tag``; GCM authenticates the
  whole blob, so truncation or tampering fails decryption.
"""

import os
import socket

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from atlassian_cli.exceptions import CryptoError

APPLICATION_PASSPHRASE = b"atlassian-cli-encryption-key"
PBKDF2_ITERATIONS = 100_000
KEY_SIZE = 32  # 256 bits
NONCE_SIZE = 12  # GCM standard nonce

DEFAULT_HOSTNAME = "default-host"


def machine_identity() -> tuple[str, int]:
    """Return the (hostname, uid) pair the key is bound to."""
    try:
        hostname = socket.gethostname() or DEFAULT_HOSTNAME
    except OSError:
        hostname = DEFAULT_HOSTNAME

    # Windows has no numeric uid
    uid = os.getuid() if hasattr(os, "getuid") else 0
    return hostname, uid


def derive_key(hostname: str | None = None, uid: int | None = None) -> bytes:
    """Derive the 256-bit store key for a machine and user.

    Deterministic: the same hostname and uid always give the same key.

    Args:
        hostname: Override for the local hostname (tests)
        uid: Override for the current user id (tests)

    Returns:
        32-byte key
    """
    if hostname is None or uid is None:
        local_hostname, local_uid = machine_identity()
        hostname = local_hostname if hostname is None else hostname
        uid = local_uid if uid is None else uid

    salt = f"{hostname}:{uid}".encode()
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    return kdf.derive(APPLICATION_PASSPHRASE)


def seal(key: bytes, plaintext: bytes) -> bytes:
    """Encrypt and authenticate ``plaintext`` under a fresh random nonce.

    Returns:
        ``nonce || ciphertext+tag``
    """
    nonce = os.urandom(NONCE_SIZE)
    return nonce + AESGCM(key).encrypt(nonce, plaintext, None)


def open_sealed(key: bytes, blob: bytes) -> bytes:
    """Decrypt a blob produced by :func:`seal`.

    Raises:
        CryptoError: If the blob is truncated, was tampered with, or was
            sealed under a different key. No plaintext is returned in
            any of these cases.
    """
    if len(blob) < NONCE_SIZE:
        raise CryptoError("Encrypted credentials are truncated (shorter than the nonce)")

    nonce, ciphertext = blob[:NONCE_SIZE], blob[NONCE_SIZE:]
    try:
        return AESGCM(key).decrypt(nonce, ciphertext, None)
    except InvalidTag as e:
        raise CryptoError(
            "Failed to decrypt credentials: wrong key or corrupted data"
        ) from e
