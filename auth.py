import logging

from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash, check_password_hash

from errors import ConflictError, UnauthorizedError, ValidationError
from models import db, User

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password."


def signup(username, email, password) -> int:
    if not (username and email and password):
        raise ValidationError("All fields are required.")

    existing = db.session.execute(
        db.select(User.id).where(User.email == email)
    ).first()
    if existing:
        raise ConflictError("Email already registered.")

    user = User(username=username, email=email, password=generate_password_hash(password))
    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        # lost a race with a concurrent signup for the same email
        db.session.rollback()
        raise ConflictError("Email already registered.")

    logger.info("New user %s", user.id)
    return user.id


def login(username, password) -> User:
    """Credential check only; nothing is issued on success."""
    if not (username and password):
        raise ValidationError("Username and password are required.")

    user = db.session.execute(
        db.select(User).filter_by(username=username).order_by(User.id)
    ).scalars().first()
    if user is None or not check_password_hash(user.password, password):
        logger.warning("Failed login for %r", username)
        raise UnauthorizedError(INVALID_CREDENTIALS)
    return user
