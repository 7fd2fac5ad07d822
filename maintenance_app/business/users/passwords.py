"""
Password hashing and verification.

New passwords are stored as bcrypt hashes. Stored values written before
hashing was introduced are still accepted:

- "$2..." prefix: bcrypt hash
- 64 hex characters: SHA-256 hex digest of the password
- anything else: legacy plaintext
"""

import hashlib
import hmac
import re

import bcrypt

BCRYPT_PREFIX = '$2'
_SHA256_HEX = re.compile(r'^[0-9a-fA-F]{64}$')


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def stored_format(stored: str) -> str:
    if stored.startswith(BCRYPT_PREFIX):
        return 'bcrypt'
    if _SHA256_HEX.match(stored):
        return 'sha256'
    return 'plaintext'


def verify_password(stored: str, candidate: str) -> bool:
    """Check a candidate password against the stored credential."""
    if not stored or candidate is None:
        return False

    fmt = stored_format(stored)
    if fmt == 'bcrypt':
        try:
            return bcrypt.checkpw(candidate.encode('utf-8'), stored.encode('utf-8'))
        except ValueError:
            # Malformed hash
            return False
    if fmt == 'sha256':
        digest = hashlib.sha256(candidate.encode('utf-8')).hexdigest()
        return hmac.compare_digest(digest, stored.lower())
    return hmac.compare_digest(candidate.encode('utf-8'), stored.encode('utf-8'))


def needs_rehash(stored: str) -> bool:
    return stored_format(stored or '') != 'bcrypt'
