import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from surveyhub import schemas
from surveyhub.auth import (
    create_access_token,
    get_current_user,
    get_password_hash,
    verify_password,
)
from surveyhub.crud import crud_user
from surveyhub.database import get_db_session
from surveyhub.models import User

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

REMEMBER_ME_MINUTES = 60 * 24 * 30


@router.post(
    "/signup", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED
)
async def signup(user_in: schemas.UserCreate, db: AsyncSession = Depends(get_db_session)):
    if await crud_user.get_user_by_email(db, user_in.email) is not None:
        raise HTTPException(
            status_code=422,
            detail="The email has already been taken.",
        )
    user = await crud_user.create_user(
        db,
        name=user_in.name,
        email=user_in.email,
        hashed_password=get_password_hash(user_in.password),
    )
    await db.commit()
    logger.info("User %s signed up", user.id)
    return schemas.AuthResponse(
        user=schemas.UserOut.model_validate(user),
        token=create_access_token(str(user.id)),
    )


@router.post("/login", response_model=schemas.AuthResponse)
async def login(credentials: schemas.LoginRequest, db: AsyncSession = Depends(get_db_session)):
    user = await crud_user.get_user_by_email(db, credentials.email)
    if user is None or not verify_password(credentials.password, user.hashed_password):
        logger.info("Failed login for %s", credentials.email)
        raise HTTPException(
            status_code=422,
            detail="The provided credentials are not correct.",
        )
    expires = REMEMBER_ME_MINUTES if credentials.remember else None
    return schemas.AuthResponse(
        user=schemas.UserOut.model_validate(user),
        token=create_access_token(str(user.id), expires_minutes=expires),
    )


@router.post("/logout")
async def logout(user: User = Depends(get_current_user)):
    # Token sind zustandslos, der Client verwirft sein Token
    logger.info("User %s logged out", user.id)
    return {"success": True}


@router.get("/me", response_model=schemas.UserOut)
async def me(user: User = Depends(get_current_user)):
    return user
