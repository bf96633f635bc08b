
import logging
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from docarchive.config import settings
from docarchive.errors import DuplicateEmail, InvalidCredentials, StorageFailure
from docarchive.models.document import Document
from docarchive.models.user import User
from docarchive.utils.security import TokenIssuer, dummy_verify, hash_password, verify_password

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == email)).scalars().first()


def register_user(db: Session, issuer: TokenIssuer, email: str, password: str, name: str) -> tuple[User, str]:
    email = normalize_email(email)
    if get_user_by_email(db, email):
        raise DuplicateEmail()
    user = User(email=email, password_hash=hash_password(password), name=name)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race against a concurrent registration for the same email
        db.rollback()
        raise DuplicateEmail()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Registration failed to persist")
        raise StorageFailure() from e
    db.refresh(user)
    logger.info("Registered user id=%s", user.id)
    return user, issuer.issue(user.id)


def login_user(db: Session, issuer: TokenIssuer, email: str, password: str) -> tuple[User, str]:
    if settings.login_casefold_email:
        email = normalize_email(email)
    user = get_user_by_email(db, email)
    if user is None:
        valid = dummy_verify()
    else:
        valid = verify_password(password, user.password_hash)
    if not valid:
        logger.info("Rejected login attempt")
        raise InvalidCredentials()
    logger.info("User id=%s logged in", user.id)
    return user, issuer.issue(user.id)


def delete_user(db: Session, user_id: int) -> bool:
    """Delete a user together with every document they own.

    Both deletes run in one transaction: either the user and all of their
    documents are gone, or nothing changed.
    """
    try:
        docs = db.execute(delete(Document).where(Document.user_id == user_id))
        users = db.execute(delete(User).where(User.id == user_id))
        if users.rowcount == 0:
            db.rollback()
            return False
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Deleting user id=%s failed", user_id)
        raise StorageFailure() from e
    logger.info("Deleted user id=%s with %s documents", user_id, docs.rowcount)
    return True
