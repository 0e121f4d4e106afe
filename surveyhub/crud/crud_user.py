from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from surveyhub.models import User


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession, name: str, email: str, hashed_password: str
) -> User:
    db_user = User(name=name, email=email, hashed_password=hashed_password)
    db.add(db_user)
    await db.flush()
    await db.refresh(db_user)
    return db_user
