import hmac

from ..extensions import bcrypt
from .settings_service import effective_credentials

BCRYPT_PREFIXES = ('$2a$', '$2b$', '$2y$')


def check_password(stored, candidate):
    if stored.startswith(BCRYPT_PREFIXES):
        try:
            return bcrypt.check_password_hash(stored, candidate)
        except ValueError:
            # Malformed hash in settings
            return False
    return hmac.compare_digest(stored.encode('utf-8'), candidate.encode('utf-8'))


def login_user(username, password):
    expected_username, expected_password = effective_credentials()
    if not expected_username or not expected_password:
        return False, "Invalid credentials"

    if username == expected_username and check_password(expected_password, password):
        return True, None
    return False, "Invalid credentials"
