from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from surveyhub.models import SurveyQuestion, SurveyQuestionAnswer


async def get_question(db: AsyncSession, question_id: int) -> Optional[SurveyQuestion]:
    return await db.get(SurveyQuestion, question_id)


async def list_questions_by_survey(
    db: AsyncSession, survey_id: int
) -> List[SurveyQuestion]:
    result = await db.execute(
        select(SurveyQuestion)
        .where(SurveyQuestion.survey_id == survey_id)
        .order_by(SurveyQuestion.id)
    )
    return list(result.scalars().all())


async def list_question_ids_by_survey(db: AsyncSession, survey_id: int) -> List[int]:
    result = await db.execute(
        select(SurveyQuestion.id).where(SurveyQuestion.survey_id == survey_id)
    )
    return list(result.scalars().all())


async def find_question_owners(db: AsyncSession, question_ids: Iterable[int]) -> Dict[int, int]:
    """Maps each existing question id to its survey id."""
    ids = list(question_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(SurveyQuestion.id, SurveyQuestion.survey_id).where(
            SurveyQuestion.id.in_(ids)
        )
    )
    return {qid: sid for qid, sid in result.all()}


async def create_question(
    db: AsyncSession, survey_id: int, fields: Dict[str, Any]
) -> SurveyQuestion:
    db_question = SurveyQuestion(survey_id=survey_id, **fields)
    db.add(db_question)
    await db.flush()
    return db_question


async def update_question(
    db: AsyncSession, db_question: SurveyQuestion, fields: Dict[str, Any]
) -> SurveyQuestion:
    for key, value in fields.items():
        setattr(db_question, key, value)
    await db.flush()
    return db_question


async def delete_questions(db: AsyncSession, question_ids: Iterable[int]) -> int:
    """Deletes the given questions together with any answers given to them."""
    ids = list(question_ids)
    if not ids:
        return 0
    await db.execute(
        delete(SurveyQuestionAnswer).where(
            SurveyQuestionAnswer.survey_question_id.in_(ids)
        )
    )
    result = await db.execute(delete(SurveyQuestion).where(SurveyQuestion.id.in_(ids)))
    return result.rowcount
