"""Authentication service: password hashing, session tokens and user lookup."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from smartrent.domain.models import User

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


class SessionTokens:
    """Issues and verifies self-signed session tokens.

    Tokens carry ``sub`` (user id), ``username`` and ``role``. The role claim is
    informational only; callers must re-read the user record before making
    authorization decisions.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expiration_minutes: int = 1440):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expiration_minutes = expiration_minutes

    def issue(self, user: User) -> str:
        expire = datetime.now(timezone.utc) + timedelta(minutes=self.expiration_minutes)
        payload = {
            "sub": user.id,
            "username": user.username,
            "role": user.role,
            "exp": expire,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> dict | None:
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def find_registered_user(db: AsyncSession, email: str, username: str) -> User | None:
    """Any user already holding ``email`` or ``username``."""
    result = await db.execute(select(User).where(or_(User.email == email, User.username == username)))
    return result.scalars().first()


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    return await db.get(User, user_id)


async def create_user(
    db: AsyncSession,
    email: str,
    role: str,
    username: str | None = None,
    password: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
    phone: str | None = None,
    landlord_id: str | None = None,
    user_id: str | None = None,
) -> User:
    user = User(
        email=email,
        username=username,
        password_hash=hash_password(password) if password else None,
        role=role,
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        landlord_id=landlord_id,
    )
    if user_id:
        user.id = user_id
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user
