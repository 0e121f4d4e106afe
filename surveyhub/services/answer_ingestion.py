"""Stores one respondent's answers to a survey."""
import json
import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from surveyhub.crud import crud_answer, crud_question, crud_survey
from surveyhub.errors import InvalidQuestionId, NotFound
from surveyhub.models import SurveyAnswer
from surveyhub.reconciler import normalize_question_id

logger = logging.getLogger(__name__)


def encode_answer_value(value: Any) -> Optional[str]:
    """Strings are stored as-is, everything else as canonical JSON text."""
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value, sort_keys=True, ensure_ascii=False)


def _resolve_answers(
    answers: Mapping[Any, Any], question_ids: List[int]
) -> List[Tuple[int, Optional[str]]]:
    known = set(question_ids)
    answered = set()
    resolved = []
    for raw_id, value in answers.items():
        qid = normalize_question_id(raw_id)
        # "5" und "05" meinen dieselbe Frage, pro Sitzung gibt es eine Antwort
        if qid is None or qid not in known or qid in answered:
            raise InvalidQuestionId(raw_id)
        answered.add(qid)
        resolved.append((qid, encode_answer_value(value)))
    return resolved


async def store_answers(
    db: AsyncSession, survey_id: int, answers: Mapping[Any, Any]
) -> SurveyAnswer:
    """Validates the whole batch, then writes one session plus one row per answer.

    Nothing is written when a question id is unknown, belongs to another
    survey, or names a question that was already answered in this batch.
    """
    survey = await crud_survey.get_survey(db, survey_id)
    if survey is None:
        raise NotFound(f"survey {survey_id} not found")

    question_ids = await crud_question.list_question_ids_by_survey(db, survey_id)
    resolved = _resolve_answers(answers, question_ids)

    now = datetime.now(timezone.utc)
    try:
        session_row = await crud_answer.create_survey_answer(
            db, survey_id, start_date=now, end_date=now
        )
        await crud_answer.create_question_answers(db, session_row.id, resolved)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Stored %d answers for survey %s (session %s)",
        len(resolved),
        survey_id,
        session_row.id,
    )
    return session_row
