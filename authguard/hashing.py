"""
AuthGuard - Password hashing for the reference identity provider.

The guard itself never hashes or compares passwords; verification belongs to
the identity provider. This wrapper gives the in-memory provider Argon2id.
"""

from argon2 import PasswordHasher as Argon2PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError


class PasswordHasher:
    """
    Argon2id password hasher.

    Security parameters (defaults):
    - time_cost=2, memory_cost=65536 (64MB), parallelism=4
    """

    algorithm = "argon2id"

    def __init__(
        self,
        time_cost: int = 2,
        memory_cost: int = 65536,
        parallelism: int = 4,
        hash_len: int = 32,
        salt_len: int = 16,
    ):
        self.hasher = Argon2PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=hash_len,
            salt_len=salt_len,
        )

    def hash(self, password: str) -> str:
        """
        Hash password.

        Example output:
            $argon2id$v=19$m=65536,t=2,p=4$saltbase64$hashbase64
        """
        return self.hasher.hash(password)

    def verify(self, password_hash: str, password: str) -> bool:
        """Return True if ``password`` matches ``password_hash``."""
        try:
            return self.hasher.verify(password_hash, password)
        except (VerifyMismatchError, VerificationError, InvalidHash):
            return False

    def needs_rehash(self, password_hash: str) -> bool:
        """Check if the hash was produced with outdated parameters."""
        try:
            return self.hasher.check_needs_rehash(password_hash)
        except InvalidHash:
            return True
