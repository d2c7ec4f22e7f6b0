"""
Password Hasher

Werkzeug-backed implementation of IPasswordHasher.
"""

from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from sharebox.domain.sharing.services import IPasswordHasher
from sharebox.domain.sharing.value_objects import SharePassword


class WerkzeugPasswordHasher(IPasswordHasher):
    """
    Hashes share passwords with werkzeug.

    Args:
        method: werkzeug hash method string, for example
            ``"pbkdf2:sha256:600000"``. None uses werkzeug's default.
    """

    def __init__(self, method: Optional[str] = None):
        self.method = method

    def hash(self, password: SharePassword) -> str:
        if self.method:
            return generate_password_hash(password.value, method=self.method)
        return generate_password_hash(password.value)

    def verify(self, password_hash: str, candidate: SharePassword) -> bool:
        if not password_hash:
            return False
        try:
            return check_password_hash(password_hash, candidate.value)
        except ValueError:
            # Unknown or corrupt hash format
            return False
