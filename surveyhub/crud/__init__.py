from . import crud_answer, crud_question, crud_survey, crud_user  # noqa: F401
