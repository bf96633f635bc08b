
import uuid
from datetime import datetime, timedelta, timezone
from passlib.context import CryptContext
from jose import jwt, JWTError
from docarchive.config import settings
from docarchive.errors import Unauthenticated

ALGORITHM = "HS256"

pwd_context = CryptContext(
    schemes=["bcrypt_sha256", "bcrypt"],
    deprecated="auto",
    bcrypt_sha256__rounds=settings.bcrypt_rounds,
    bcrypt__rounds=settings.bcrypt_rounds,
)

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(password, hashed)
    except (ValueError, TypeError):
        # unknown or malformed hash
        return False

def dummy_verify() -> bool:
    # spends the same hashing time as verify_password when there is no user to check
    pwd_context.dummy_verify()
    return False


class TokenIssuer:
    """Signs and checks expiring bearer tokens.

    A token carries the user id in ``sub`` plus ``iat``/``exp`` and a random
    ``jti``, so it can be verified with the secret alone and two tokens issued
    for the same user never collide.
    """

    def __init__(self, secret_key: str | None, expire_minutes: int):
        if not secret_key:
            raise RuntimeError("SECRET_KEY is not configured")
        self.secret_key = secret_key
        self.expire_minutes = expire_minutes

    def issue(self, user_id: int, expires_minutes: int | None = None) -> str:
        now = datetime.now(timezone.utc)
        expire = now + timedelta(minutes=expires_minutes if expires_minutes is not None else self.expire_minutes)
        to_encode = {
            "sub": str(user_id),
            "iat": now,
            "exp": expire,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=ALGORITHM)

    def verify(self, token: str) -> int:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[ALGORITHM])
        except JWTError:
            raise Unauthenticated("Invalid or expired token")
        sub = payload.get("sub")
        try:
            return int(sub)
        except (TypeError, ValueError):
            raise Unauthenticated("Invalid token subject")


def get_token_issuer() -> TokenIssuer:
    return TokenIssuer(settings.secret_key, settings.access_token_expire_minutes)
