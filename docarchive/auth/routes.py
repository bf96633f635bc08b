
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from docarchive.auth.deps import get_db, get_issuer
from docarchive.auth.service import register_user, login_user
from docarchive.schemas.auth import RegisterIn, LoginIn, AuthOut, UserOut
from docarchive.utils.security import TokenIssuer

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
def register(body: RegisterIn, db: Session = Depends(get_db), issuer: TokenIssuer = Depends(get_issuer)):
    user, token = register_user(db, issuer, body.email, body.password, body.name)
    return AuthOut(user=UserOut.model_validate(user), token=token)

@router.post("/login", response_model=AuthOut)
def login(body: LoginIn, db: Session = Depends(get_db), issuer: TokenIssuer = Depends(get_issuer)):
    user, token = login_user(db, issuer, body.email, body.password)
    return AuthOut(user=UserOut.model_validate(user), token=token)
