from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from surveyhub.models import SurveyAnswer, SurveyQuestionAnswer


async def create_survey_answer(
    db: AsyncSession, survey_id: int, start_date: datetime, end_date: datetime
) -> SurveyAnswer:
    db_answer = SurveyAnswer(survey_id=survey_id, start_date=start_date, end_date=end_date)
    db.add(db_answer)
    await db.flush()  # für die ID
    return db_answer


async def create_question_answers(
    db: AsyncSession,
    survey_answer_id: int,
    values: Iterable[Tuple[int, Optional[str]]],
) -> List[SurveyQuestionAnswer]:
    rows = [
        SurveyQuestionAnswer(
            survey_question_id=question_id,
            survey_answer_id=survey_answer_id,
            answer=answer,
        )
        for question_id, answer in values
    ]
    db.add_all(rows)
    await db.flush()
    return rows


async def count_sessions_by_survey(db: AsyncSession, survey_id: int) -> int:
    result = await db.execute(
        select(func.count(SurveyAnswer.id)).where(SurveyAnswer.survey_id == survey_id)
    )
    return result.scalar_one()
