"""Password hashing with bcrypt."""

from dataclasses import dataclass

import bcrypt

# bcrypt only reads the first 72 bytes of its input; recent releases reject longer ones.
MAX_PASSWORD_BYTES = 72


@dataclass(frozen=True)
class PasswordHasher:
    """
    Salted one-way password hashing.

    The work factor is fixed when the hasher is built from settings and
    cannot be changed per call.
    """

    rounds: int = 10

    def hash(self, plaintext: str) -> str:
        return bcrypt.hashpw(plaintext.encode(), bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, plaintext: str, digest: str) -> bool:
        """Constant-time check. Returns False on mismatch or a malformed digest."""
        try:
            return bcrypt.checkpw(plaintext.encode(), digest.encode())
        except ValueError:
            return False


def password_too_long(plaintext: str) -> bool:
    return len(plaintext.encode()) > MAX_PASSWORD_BYTES
