"""Reconciles a survey's persisted questions with a submitted question list."""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from .crud import crud_question
from .errors import NotFound
from .models import SurveyQuestion
from .question_validation import ValidatedQuestion, validate_question

logger = logging.getLogger(__name__)


def normalize_question_id(raw_id: Any) -> Optional[int]:
    """Integer id of a submitted question, or None for new/temporary ids.

    Clients use UUID strings as placeholders for unsaved questions; those and
    missing ids both mean "insert".
    """
    if isinstance(raw_id, bool):
        return None
    if isinstance(raw_id, int):
        return raw_id
    if isinstance(raw_id, str):
        digits = raw_id.strip()
        # nur ASCII-Ziffern, "²" oder "٣" zählen nicht
        if digits.isascii() and digits.isdigit():
            return int(digits)
    return None


@dataclass
class QuestionDiff:
    to_delete: Set[int] = field(default_factory=set)
    # (position in submitted list, item)
    to_add: List[Tuple[int, Mapping[str, Any]]] = field(default_factory=list)
    to_update: List[Tuple[int, int, Mapping[str, Any]]] = field(default_factory=list)


def compute_question_diff(
    existing_ids: Iterable[int], submitted: Sequence[Mapping[str, Any]]
) -> QuestionDiff:
    """Splits a submission into ids to delete, items to insert and items to update.

    An existing id submitted more than once is updated once, from its last
    occurrence.
    """
    existing = set(existing_ids)
    diff = QuestionDiff()
    updates: Dict[int, Tuple[int, Mapping[str, Any]]] = {}

    for index, item in enumerate(submitted):
        qid = normalize_question_id(item.get("id"))
        if qid is not None and qid in existing:
            updates[qid] = (index, item)
        else:
            # unbekannte oder temporäre IDs werden neu angelegt
            diff.to_add.append((index, item))

    diff.to_update = [(index, qid, item) for qid, (index, item) in updates.items()]
    diff.to_delete = existing - set(updates)
    return diff


async def _check_foreign_ids(
    db: AsyncSession, survey_id: int, diff: QuestionDiff
) -> None:
    """A numeric id that belongs to a different survey is rejected."""
    candidate_ids = set()
    for _, item in diff.to_add:
        qid = normalize_question_id(item.get("id"))
        if qid is not None:
            candidate_ids.add(qid)
    owners = await crud_question.find_question_owners(db, candidate_ids)
    for qid, owner_survey_id in owners.items():
        if owner_survey_id != survey_id:
            raise NotFound(f"question {qid} does not belong to survey {survey_id}")


async def reconcile_questions(
    db: AsyncSession, survey_id: int, submitted: Sequence[Mapping[str, Any]]
) -> List[SurveyQuestion]:
    """Applies delete, insert and update phases for one survey.

    Runs inside the caller's transaction and does not commit. Every item is
    validated before the first write, so a validation error leaves the
    question set untouched.
    """
    existing_ids = await crud_question.list_question_ids_by_survey(db, survey_id)
    diff = compute_question_diff(existing_ids, submitted)

    validated_new: List[ValidatedQuestion] = [
        validate_question(item, ("questions", index)) for index, item in diff.to_add
    ]
    validated_updates: Dict[int, ValidatedQuestion] = {
        qid: validate_question(item, ("questions", index))
        for index, qid, item in diff.to_update
    }
    await _check_foreign_ids(db, survey_id, diff)

    deleted = await crud_question.delete_questions(db, diff.to_delete)

    for validated in validated_new:
        await crud_question.create_question(db, survey_id, validated.as_columns())

    for qid, validated in validated_updates.items():
        db_question = await crud_question.get_question(db, qid)
        if db_question is None or db_question.survey_id != survey_id:
            raise NotFound(f"question {qid} not found in survey {survey_id}")
        await crud_question.update_question(db, db_question, validated.as_columns())

    logger.info(
        "Survey %s questions reconciled: %d deleted, %d added, %d updated",
        survey_id,
        deleted,
        len(validated_new),
        len(validated_updates),
    )
    return await crud_question.list_questions_by_survey(db, survey_id)
