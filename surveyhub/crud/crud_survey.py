import re
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from surveyhub.models import Survey, SurveyAnswer, SurveyQuestion, SurveyQuestionAnswer


def slugify_title(title: str) -> str:
    slug = title.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug or "survey"


async def generate_unique_slug(db: AsyncSession, title: str) -> str:
    base_slug = slugify_title(title)
    slug = base_slug
    counter = 1
    while await get_survey_by_slug(db, slug) is not None:
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug


async def get_survey(db: AsyncSession, survey_id: int) -> Optional[Survey]:
    return await db.get(Survey, survey_id)


async def get_survey_by_slug(db: AsyncSession, slug: str) -> Optional[Survey]:
    result = await db.execute(select(Survey).where(Survey.slug == slug))
    return result.scalar_one_or_none()


async def list_surveys_by_user(
    db: AsyncSession, user_id: int, offset: int, limit: int
) -> Tuple[List[Survey], int]:
    """One page of a user's surveys (newest first) plus the total count."""
    total = (
        await db.execute(
            select(func.count(Survey.id)).where(Survey.user_id == user_id)
        )
    ).scalar_one()
    result = await db.execute(
        select(Survey)
        .where(Survey.user_id == user_id)
        .order_by(Survey.created_at.desc(), Survey.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def create_survey(db: AsyncSession, fields: Dict[str, Any]) -> Survey:
    db_survey = Survey(**fields)
    db.add(db_survey)
    await db.flush()  # für die ID
    await db.refresh(db_survey)
    return db_survey


async def update_survey(
    db: AsyncSession, db_survey: Survey, fields: Dict[str, Any]
) -> Survey:
    for key, value in fields.items():
        setattr(db_survey, key, value)
    await db.flush()
    await db.refresh(db_survey)
    return db_survey


async def delete_survey(db: AsyncSession, db_survey: Survey) -> None:
    """Deletes the survey and everything hanging off it, children first."""
    session_ids = select(SurveyAnswer.id).where(SurveyAnswer.survey_id == db_survey.id)
    await db.execute(
        delete(SurveyQuestionAnswer).where(
            SurveyQuestionAnswer.survey_answer_id.in_(session_ids)
        )
    )
    await db.execute(delete(SurveyAnswer).where(SurveyAnswer.survey_id == db_survey.id))
    await db.execute(
        delete(SurveyQuestion).where(SurveyQuestion.survey_id == db_survey.id)
    )
    await db.delete(db_survey)
    await db.flush()
