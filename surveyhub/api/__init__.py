from fastapi import APIRouter

from .endpoints import auth, survey

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(survey.router)
