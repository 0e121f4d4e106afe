import logging
from datetime import datetime, timezone

import pytest

from surveyhub.crud import crud_answer, crud_question, crud_survey
from surveyhub.errors import Forbidden, InvalidImageType, NotFound, QuestionValidationError
from surveyhub.models import Survey
from surveyhub.question_validation import decode_question_data
from surveyhub.schemas import SurveyCreate, SurveyUpdate
from surveyhub.services import answer_ingestion, survey_manager

from .conftest import PNG_DATA_URI, survey_payload


def _ids(questions):
    return [q.id for q in questions]


async def test_create_keeps_every_question_and_its_payload(db, storage, owner):
    payload = survey_payload()
    survey, questions = await survey_manager.create_survey(
        db, storage, owner.id, SurveyCreate(**payload)
    )

    assert survey.slug == "customer-feedback"
    assert survey.user_id == owner.id
    assert len(questions) == len(payload["questions"])
    for submitted, stored in zip(payload["questions"], questions):
        assert decode_question_data(stored.data) == submitted["data"]


async def test_slug_is_unique_and_survives_updates(db, storage, owner):
    first, _ = await survey_manager.create_survey(
        db, storage, owner.id, SurveyCreate(**survey_payload(questions=[]))
    )
    second, _ = await survey_manager.create_survey(
        db, storage, owner.id, SurveyCreate(**survey_payload(questions=[]))
    )
    assert (first.slug, second.slug) == ("customer-feedback", "customer-feedback-1")

    updated, _ = await survey_manager.update_survey(
        db, storage, first.id, owner.id, SurveyUpdate(**survey_payload(title="Renamed", questions=[]))
    )
    assert updated.title == "Renamed"
    assert updated.slug == "customer-feedback"


async def test_update_drops_omitted_questions_only_in_that_survey(db, storage, owner):
    survey, questions = await survey_manager.create_survey(
        db, storage, owner.id, SurveyCreate(**survey_payload())
    )
    _, other_questions = await survey_manager.create_survey(
        db, storage, owner.id, SurveyCreate(**survey_payload(title="Other"))
    )
    kept = questions[1]

    payload = survey_payload(
        questions=[
            {"id": kept.id, "question": kept.question, "type": kept.type,
             "description": kept.description, "data": decode_question_data(kept.data)}
        ]
    )
    _, after = await survey_manager.update_survey(
        db, storage, survey.id, owner.id, SurveyUpdate(**payload)
    )

    assert _ids(after) == [kept.id]
    assert await crud_question.get_question(db, questions[0].id) is None
    other_survey_id = other_questions[0].survey_id
    assert _ids(await crud_question.list_questions_by_survey(db, other_survey_id)) == _ids(
        other_questions
    )


async def test_update_preserves_ids_and_assigns_new_ones(db, storage, owner):
    survey, questions = await survey_manager.create_survey(
        db, storage, owner.id, SurveyCreate(**survey_payload())
    )
    original_ids = set(_ids(questions))

    submitted = [
        {"id": q.id, "question": q.question + "!", "type": q.type,
         "description": q.description, "data": decode_question_data(q.data)}
        for q in questions
    ]
    submitted.append(
        {"id": "new-uuid", "question": "Rate us", "type": "rating", "data": {"scale": 5}}
    )
    _, after = await survey_manager.update_survey(
        db, storage, survey.id, owner.id, SurveyUpdate(**survey_payload(questions=submitted))
    )

    after_ids = set(_ids(after))
    assert original_ids < after_ids
    assert len(after_ids - original_ids) == 1
    assert all(q.question.endswith("!") for q in after if q.id in original_ids)


async def test_repeating_an_update_is_a_no_op(db, storage, owner):
    survey, questions = await survey_manager.create_survey(
        db, storage, owner.id, SurveyCreate(**survey_payload())
    )
    submitted = [
        {"id": q.id, "question": q.question, "type": q.type,
         "description": q.description, "data": decode_question_data(q.data)}
        for q in questions
    ]
    update = SurveyUpdate(**survey_payload(questions=submitted))

    _, once = await survey_manager.update_survey(db, storage, survey.id, owner.id, update)
    snapshot = [(q.id, q.question, q.type, q.description, q.data) for q in once]
    _, twice = await survey_manager.update_survey(db, storage, survey.id, owner.id, update)

    assert [(q.id, q.question, q.type, q.description, q.data) for q in twice] == snapshot


async def test_failed_update_leaves_survey_untouched(db, storage, owner):
    survey, questions = await survey_manager.create_survey(
        db, storage, owner.id, SurveyCreate(**survey_payload())
    )
    # nach dem Rollback sind alle Attribute abgelaufen
    survey_id, question_ids, owner_id = survey.id, _ids(questions), owner.id
    broken = survey_payload(
        title="Should not stick",
        questions=[{"question": "Pick", "type": "checkbox", "data": {"options": []}}],
    )

    with pytest.raises(QuestionValidationError):
        await survey_manager.update_survey(
            db, storage, survey_id, owner_id, SurveyUpdate(**broken)
        )

    reloaded = await db.get(Survey, survey_id)
    assert reloaded.title == "Customer Feedback"
    assert sorted(await crud_question.list_question_ids_by_survey(db, survey_id)) == sorted(
        question_ids
    )


async def test_only_the_owner_may_change_a_survey(db, storage, owner, stranger):
    survey, _ = await survey_manager.create_survey(
        db, storage, owner.id, SurveyCreate(**survey_payload())
    )

    with pytest.raises(Forbidden):
        await survey_manager.get_owned_survey(db, survey.id, stranger.id)
    with pytest.raises(Forbidden):
        await survey_manager.update_survey(
            db, storage, survey.id, stranger.id, SurveyUpdate(**survey_payload())
        )
    with pytest.raises(Forbidden):
        await survey_manager.delete_survey(db, storage, survey.id, stranger.id)
    with pytest.raises(NotFound):
        await survey_manager.delete_survey(db, storage, 4242, owner.id)


async def test_new_image_replaces_old_file(db, storage, owner):
    survey, _ = await survey_manager.create_survey(
        db, storage, owner.id, SurveyCreate(**survey_payload(image=PNG_DATA_URI))
    )
    old_image = survey.image
    assert (storage.root / old_image).exists()

    updated, _ = await survey_manager.update_survey(
        db, storage, survey.id, owner.id, SurveyUpdate(**survey_payload(image=PNG_DATA_URI))
    )

    assert updated.image != old_image
    assert (storage.root / updated.image).exists()
    assert not (storage.root / old_image).exists()


async def test_bad_image_is_rejected_before_anything_is_written(db, storage, owner):
    with pytest.raises(InvalidImageType):
        await survey_manager.create_survey(
            db, storage, owner.id,
            SurveyCreate(**survey_payload(image="data:image/bmp;base64,AAAA")),
        )
    _, total = await crud_survey.list_surveys_by_user(db, owner.id, offset=0, limit=10)
    assert total == 0


async def test_delete_removes_questions_answers_and_image(db, storage, owner, caplog):
    survey, questions = await survey_manager.create_survey(
        db, storage, owner.id, SurveyCreate(**survey_payload(image=PNG_DATA_URI))
    )
    image = survey.image
    await answer_ingestion.store_answers(db, survey.id, {str(questions[0].id): "Bob"})

    caplog.set_level(logging.INFO, logger="surveyhub")
    await survey_manager.delete_survey(db, storage, survey.id, owner.id)

    assert "together with 1 answer sessions" in caplog.text
    assert await crud_survey.get_survey(db, survey.id) is None
    assert await crud_question.list_questions_by_survey(db, survey.id) == []
    assert await crud_answer.count_sessions_by_survey(db, survey.id) == 0
    assert not (storage.root / image).exists()


async def test_listing_is_paginated_newest_first(db, storage, owner, stranger):
    created = []
    for title in ("First", "Second", "Third"):
        survey, _ = await survey_manager.create_survey(
            db, storage, owner.id, SurveyCreate(**survey_payload(title=title))
        )
        created.append(survey.id)
    await survey_manager.create_survey(
        db, storage, stranger.id, SurveyCreate(**survey_payload(title="Not mine"))
    )

    page_one, total, last_page = await survey_manager.list_surveys(db, owner.id, page=1, per_page=2)
    page_two, _, _ = await survey_manager.list_surveys(db, owner.id, page=2, per_page=2)

    assert (total, last_page) == (3, 2)
    assert [s.id for s, _ in page_one] == [created[2], created[1]]
    assert [s.id for s, _ in page_two] == [created[0]]


def test_public_visibility_rules():
    future = datetime(2099, 1, 1, tzinfo=timezone.utc)
    past = datetime(2020, 1, 1, tzinfo=timezone.utc)
    now = datetime(2026, 10, 19, tzinfo=timezone.utc)

    assert not survey_manager.is_publicly_visible(Survey(status=False, expire_date=future), now)
    assert survey_manager.is_publicly_visible(Survey(status=True, expire_date=future), now)
    assert not survey_manager.is_publicly_visible(Survey(status=True, expire_date=past), now)
    assert survey_manager.is_publicly_visible(Survey(status=True, expire_date=None), now)
    # SQLite liefert naive Zeitstempel zurück
    assert survey_manager.is_publicly_visible(
        Survey(status=True, expire_date=datetime(2099, 1, 1)), now
    )


async def test_get_public_survey_hides_inactive_and_expired(db, storage, owner):
    inactive, _ = await survey_manager.create_survey(
        db, storage, owner.id, SurveyCreate(**survey_payload(title="Draft", status=False))
    )
    expired, _ = await survey_manager.create_survey(
        db, storage, owner.id,
        SurveyCreate(**survey_payload(title="Old", expire_date="2020-01-01")),
    )
    live, questions = await survey_manager.create_survey(
        db, storage, owner.id, SurveyCreate(**survey_payload(title="Live"))
    )

    for slug in (inactive.slug, expired.slug, "does-not-exist"):
        with pytest.raises(NotFound):
            await survey_manager.get_public_survey(db, slug)

    found, found_questions = await survey_manager.get_public_survey(db, live.slug)
    assert found.id == live.id
    assert _ids(found_questions) == _ids(questions)
