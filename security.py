from passlib.context import CryptContext

import config

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=config.BCRYPT_ROUNDS,
)

# Verified against when a username does not exist, so unknown users cost the
# same bcrypt round as a wrong password.
_DUMMY_HASH = pwd_context.hash("sharevault-dummy-password")


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Verify plain password against bcrypt hash. Never raises - returns False on error."""
    try:
        return pwd_context.verify(password, hashed)
    except (ValueError, TypeError):
        return False


def burn_verification(password: str) -> bool:
    """Run a full verification against a throwaway hash; always False."""
    verify_password(password, _DUMMY_HASH)
    return False
