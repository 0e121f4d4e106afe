from typing import List

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from surveyhub import config, schemas
from surveyhub.auth import get_current_user
from surveyhub.database import get_db_session
from surveyhub.image_storage import ImageStorage, get_image_storage
from surveyhub.models import Survey, SurveyQuestion, User
from surveyhub.services import answer_ingestion, survey_manager

router = APIRouter(prefix="/survey", tags=["survey"])


def survey_to_schema(survey: Survey, questions: List[SurveyQuestion]) -> schemas.SurveyOut:
    image_url = f"{config.BACKEND_BASE_URL}/{survey.image}" if survey.image else None
    return schemas.SurveyOut(
        id=survey.id,
        title=survey.title,
        slug=survey.slug,
        status=bool(survey.status),
        image_url=image_url,
        description=survey.description,
        expire_date=schemas.as_utc(survey.expire_date),
        created_at=survey.created_at,
        updated_at=survey.updated_at,
        questions=[schemas.QuestionOut.model_validate(q) for q in questions],
    )


@router.get("", response_model=schemas.SurveyPage)
async def list_surveys(
    page: int = Query(1, ge=1),
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
):
    """Lists the caller's surveys, newest first."""
    per_page = config.SURVEYS_PER_PAGE
    items, total, last_page = await survey_manager.list_surveys(
        db, user.id, page=page, per_page=per_page
    )
    return schemas.SurveyPage(
        data=[survey_to_schema(s, qs) for s, qs in items],
        meta=schemas.PageMeta(
            current_page=page, last_page=last_page, per_page=per_page, total=total
        ),
    )


@router.post("", response_model=schemas.SurveyOut, status_code=status.HTTP_201_CREATED)
async def create_survey(
    survey_in: schemas.SurveyCreate,
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    storage: ImageStorage = Depends(get_image_storage),
):
    survey, questions = await survey_manager.create_survey(db, storage, user.id, survey_in)
    return survey_to_schema(survey, questions)


# Öffentliche Endpunkte (ohne Login)
@router.get("/get-by-slug/{slug}", response_model=schemas.SurveyOut)
async def get_survey_by_slug(slug: str, db: AsyncSession = Depends(get_db_session)):
    survey, questions = await survey_manager.get_public_survey(db, slug)
    return survey_to_schema(survey, questions)


@router.post("/{survey_id}/answer", status_code=status.HTTP_201_CREATED)
async def store_answer(
    survey_id: int,
    submission: schemas.AnswerSubmission,
    db: AsyncSession = Depends(get_db_session),
):
    await answer_ingestion.store_answers(db, survey_id, submission.answers)
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("/{survey_id}", response_model=schemas.SurveyOut)
async def get_survey(
    survey_id: int,
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
):
    survey, questions = await survey_manager.get_owned_survey(db, survey_id, user.id)
    return survey_to_schema(survey, questions)


@router.api_route("/{survey_id}", methods=["PUT", "PATCH"], response_model=schemas.SurveyOut)
async def update_survey(
    survey_id: int,
    survey_in: schemas.SurveyUpdate,
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    storage: ImageStorage = Depends(get_image_storage),
):
    survey, questions = await survey_manager.update_survey(
        db, storage, survey_id, user.id, survey_in
    )
    return survey_to_schema(survey, questions)


@router.delete("/{survey_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_survey(
    survey_id: int,
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    storage: ImageStorage = Depends(get_image_storage),
):
    await survey_manager.delete_survey(db, storage, survey_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
