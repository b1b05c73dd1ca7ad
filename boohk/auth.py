import os
from typing import Optional
from passlib.context import CryptContext
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from fastapi import Request, HTTPException, status, Depends
from sqlalchemy.orm import Session

from boohk.database import get_db, DATABASE_URL
from boohk.models.user import User
from boohk.timeutil import utc_now

# Password hashing
if DATABASE_URL.startswith("sqlite"):
    # pbkdf2_sha256 avoids compiled bcrypt in dev and tests
    pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
else:
    pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Session serializer
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production-min-32-characters")
SESSION_EXPIRE_MINUTES = int(os.getenv("SESSION_EXPIRE_MINUTES", "480"))
SESSION_COOKIE = "session"
serializer = URLSafeTimedSerializer(SECRET_KEY)


def hash_password(password: str) -> str:
    """Hash a password for storing."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a stored password against one provided by user."""
    return pwd_context.verify(plain_password, hashed_password)


def create_session_token(user_id: str) -> str:
    """Create a session token for a user."""
    data = {
        "user_id": user_id,
        "created": utc_now().isoformat()
    }
    return serializer.dumps(data)


def decode_session_token(token: str) -> Optional[dict]:
    """Decode and validate a session token."""
    try:
        return serializer.loads(token, max_age=SESSION_EXPIRE_MINUTES * 60)
    except (BadSignature, SignatureExpired):
        return None


def get_session_user_id(request: Request) -> Optional[str]:
    """Get user ID from session cookie."""
    token = request.cookies.get(SESSION_COOKIE)
    if not token:
        return None

    data = decode_session_token(token)
    if not data:
        return None

    return data.get("user_id")


def get_current_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    """The signed-in, active user, or None."""
    user_id = get_session_user_id(request)
    if not user_id:
        return None
    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        return None
    return user


def require_auth(user: Optional[User] = Depends(get_current_user)) -> User:
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user


def require_role(*roles):
    """Dependency requiring any of the given department roles. Admins always pass."""
    def dependency(user: User = Depends(require_auth)) -> User:
        if not any(user.has_role(role) for role in roles):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return user
    return dependency


def require_admin():
    """Require admin role."""
    return require_role("admin")


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticate a user by email and password."""
    user = db.query(User).filter(User.email == email).first()
    if not user:
        return None
    if not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def set_session_cookie(response, user_id: str):
    """Set session cookie on response."""
    token = create_session_token(user_id)
    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        httponly=True,
        max_age=SESSION_EXPIRE_MINUTES * 60,
        samesite="lax"
    )
    return response


def clear_session_cookie(response):
    """Clear session cookie on response."""
    response.delete_cookie(SESSION_COOKIE)
    return response
