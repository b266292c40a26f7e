"""Argon2id password hashing with self-describing encoded hashes.

Encoded form::

    $argon2id$v=19$m=<memory KiB>,t=<iterations>,p=<lanes>$<b64 salt>$<b64 hash>

Verification reads the parameters back out of the stored string, so hashes
created under older settings keep verifying after the defaults change.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass

from argon2 import PasswordHasher, Type, extract_parameters
from argon2 import exceptions as argon2_exceptions
from argon2.low_level import ARGON2_VERSION


class InvalidHashError(ValueError):
    """The stored hash string cannot be parsed or uses an unsupported scheme."""


@dataclass(frozen=True)
class Argon2Params:
    """Cost parameters for Argon2id."""

    time_cost: int = 1
    memory_cost: int = 64 * 1024
    parallelism: int = 4
    salt_length: int = 16
    hash_length: int = 32

    def hasher(self) -> PasswordHasher:
        return PasswordHasher(
            time_cost=self.time_cost,
            memory_cost=self.memory_cost,
            parallelism=self.parallelism,
            hash_len=self.hash_length,
            salt_len=self.salt_length,
            type=Type.ID,
        )


DEFAULT_PARAMS = Argon2Params()

# verify() takes every cost parameter from the hash itself.
_verifier = DEFAULT_PARAMS.hasher()


def hash_password(password: str, params: Argon2Params = DEFAULT_PARAMS) -> str:
    """Hash ``password`` with a fresh random salt and return the encoded string."""
    return params.hasher().hash(password)


def decode_hash(encoded: str) -> Argon2Params:
    """Return the parameters an encoded Argon2id hash was created with.

    Raises:
        InvalidHashError: On malformed input, another Argon2 variant, or
            another Argon2 version.
    """
    try:
        parsed = extract_parameters(encoded)
    except argon2_exceptions.InvalidHashError as exc:
        raise InvalidHashError(f"invalid hash format: {exc}") from exc
    if parsed.type is not Type.ID:
        raise InvalidHashError(f"unsupported hash type: {parsed.type.name.lower()}")
    if parsed.version != ARGON2_VERSION:
        raise InvalidHashError("incompatible argon2 version")
    return Argon2Params(
        time_cost=parsed.time_cost,
        memory_cost=parsed.memory_cost,
        parallelism=parsed.parallelism,
        salt_length=parsed.salt_len,
        hash_length=parsed.hash_len,
    )


def verify_password(password: str, encoded: str) -> bool:
    """Check ``password`` against an encoded hash in constant time.

    Raises:
        InvalidHashError: If ``encoded`` is not a usable Argon2id hash.
    """
    decode_hash(encoded)
    try:
        return _verifier.verify(encoded, password)
    except argon2_exceptions.VerifyMismatchError:
        return False
    except (argon2_exceptions.InvalidHashError, argon2_exceptions.VerificationError) as exc:
        raise InvalidHashError(f"unusable hash: {exc}") from exc


def generate_secure_token(length: int) -> str:
    """Return a URL-safe random token exactly ``length`` characters long."""
    if length < 1:
        raise ValueError(f"length must be positive, got {length}")
    return secrets.token_urlsafe(length)[:length]
