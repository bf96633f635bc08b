
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from docarchive.auth.service import get_user
from docarchive.db.session import SessionLocal
from docarchive.errors import Unauthenticated
from docarchive.utils.security import TokenIssuer, get_token_issuer

bearer = HTTPBearer(auto_error=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_issuer() -> TokenIssuer:
    return get_token_issuer()

def get_current_user_id(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_issuer),
) -> int:
    if creds is None or not creds.credentials:
        raise Unauthenticated()

    user_id = issuer.verify(creds.credentials)

    if get_user(db, user_id) is None:
        raise Unauthenticated("User no longer exists")
    return user_id
