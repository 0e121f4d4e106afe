"""Survey create/update/delete, ownership checks and public lookup.

Every mutating operation is one transaction: it commits when everything
succeeded and rolls back on any error. Image files are written before the
database work and cleaned up best-effort, since the filesystem cannot take
part in the transaction.
"""
import logging
import math
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from surveyhub.crud import crud_answer, crud_question, crud_survey
from surveyhub.errors import Forbidden, NotFound
from surveyhub.image_storage import (
    ImageStorage,
    delete_image_quietly,
    store_image_data_uri,
)
from surveyhub.models import Survey, SurveyQuestion
from surveyhub.reconciler import reconcile_questions
from surveyhub.schemas import SurveyCreate, SurveyUpdate, as_utc

logger = logging.getLogger(__name__)

SurveyWithQuestions = Tuple[Survey, List[SurveyQuestion]]


def ensure_owner(survey: Survey, caller_id: int) -> None:
    if survey.user_id != caller_id:
        logger.warning(
            "User %s tried to access survey %s owned by user %s",
            caller_id,
            survey.id,
            survey.user_id,
        )
        raise Forbidden("This action is unauthorized.")


def is_publicly_visible(survey: Survey, now: Optional[datetime] = None) -> bool:
    """Active and not past its expiry date; no expiry date means no expiry."""
    if not survey.status:
        return False
    if survey.expire_date is None:
        return True
    now = as_utc(now) if now else datetime.now(timezone.utc)
    return now <= as_utc(survey.expire_date)


async def _load_owned(db: AsyncSession, survey_id: int, caller_id: int) -> Survey:
    survey = await crud_survey.get_survey(db, survey_id)
    if survey is None:
        raise NotFound(f"survey {survey_id} not found")
    ensure_owner(survey, caller_id)
    return survey


async def create_survey(
    db: AsyncSession, storage: ImageStorage, owner_id: int, survey_in: SurveyCreate
) -> SurveyWithQuestions:
    image_path = None
    if survey_in.image:
        image_path = store_image_data_uri(storage, survey_in.image)

    try:
        fields = survey_in.survey_fields()
        fields["user_id"] = owner_id
        fields["image"] = image_path
        fields["slug"] = await crud_survey.generate_unique_slug(db, survey_in.title)
        survey = await crud_survey.create_survey(db, fields)
        # Neue Umfrage: leere Ausgangsmenge, also werden alle Fragen angelegt
        questions = await reconcile_questions(db, survey.id, survey_in.question_payloads())
        await db.commit()
    except Exception:
        await db.rollback()
        if image_path:
            delete_image_quietly(storage, image_path)
        raise

    logger.info(
        "User %s created survey %s (%s) with %d questions",
        owner_id,
        survey.id,
        survey.slug,
        len(questions),
    )
    return survey, questions


async def update_survey(
    db: AsyncSession,
    storage: ImageStorage,
    survey_id: int,
    caller_id: int,
    survey_in: SurveyUpdate,
) -> SurveyWithQuestions:
    survey = await _load_owned(db, survey_id, caller_id)
    old_image = survey.image

    new_image = None
    if survey_in.image:
        new_image = store_image_data_uri(storage, survey_in.image)

    try:
        # Slug bleibt unverändert
        fields = survey_in.survey_fields()
        if new_image:
            fields["image"] = new_image
        survey = await crud_survey.update_survey(db, survey, fields)
        questions = await reconcile_questions(db, survey.id, survey_in.question_payloads())
        await db.commit()
    except Exception:
        await db.rollback()
        if new_image:
            delete_image_quietly(storage, new_image)
        raise

    if new_image and old_image:
        delete_image_quietly(storage, old_image)

    logger.info("User %s updated survey %s", caller_id, survey_id)
    return survey, questions


async def delete_survey(
    db: AsyncSession, storage: ImageStorage, survey_id: int, caller_id: int
) -> None:
    survey = await _load_owned(db, survey_id, caller_id)
    image = survey.image
    sessions = await crud_answer.count_sessions_by_survey(db, survey_id)

    try:
        await crud_survey.delete_survey(db, survey)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    if image:
        delete_image_quietly(storage, image)
    logger.info(
        "User %s deleted survey %s together with %d answer sessions",
        caller_id,
        survey_id,
        sessions,
    )


async def get_owned_survey(
    db: AsyncSession, survey_id: int, caller_id: int
) -> SurveyWithQuestions:
    survey = await _load_owned(db, survey_id, caller_id)
    return survey, await crud_question.list_questions_by_survey(db, survey.id)


async def list_surveys(
    db: AsyncSession, owner_id: int, page: int, per_page: int
) -> Tuple[List[SurveyWithQuestions], int, int]:
    """Returns ``(items, total, last_page)`` for one page of the owner's surveys."""
    page = max(page, 1)
    surveys, total = await crud_survey.list_surveys_by_user(
        db, owner_id, offset=(page - 1) * per_page, limit=per_page
    )
    items = [
        (survey, await crud_question.list_questions_by_survey(db, survey.id))
        for survey in surveys
    ]
    last_page = max(1, math.ceil(total / per_page))
    return items, total, last_page


async def get_public_survey(
    db: AsyncSession, slug: str, now: Optional[datetime] = None
) -> SurveyWithQuestions:
    survey = await crud_survey.get_survey_by_slug(db, slug)
    # Inaktiv/abgelaufen ist nach außen nicht von "gibt es nicht" zu unterscheiden
    if survey is None or not is_publicly_visible(survey, now):
        raise NotFound(f"survey {slug!r} not available")
    return survey, await crud_question.list_questions_by_survey(db, survey.id)
