"""Domain exceptions raised by the service layer.

None of these know about HTTP; ``surveyhub.main`` maps them to responses.
"""
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union


@dataclass(frozen=True)
class FieldError:
    loc: Tuple[Union[str, int], ...]
    msg: str
    code: str


class SurveyError(Exception):
    """Base class for all domain errors."""


class NotFound(SurveyError):
    pass


class Forbidden(SurveyError):
    pass


class SurveyValidationError(SurveyError):
    """Raised for client input that cannot be accepted."""

    def __init__(self, errors: Sequence[FieldError]):
        self.errors: List[FieldError] = list(errors)
        super().__init__(self.errors[0].msg if self.errors else "invalid input")

    @property
    def first(self) -> FieldError:
        return self.errors[0]


class QuestionValidationError(SurveyValidationError):
    pass


class InvalidImageType(SurveyValidationError):
    def __init__(self, ext: str):
        self.ext = ext
        super().__init__(
            [FieldError(("image",), f"invalid image type: {ext}", "invalid_image_type")]
        )


class DecodeFailure(SurveyValidationError):
    def __init__(self, reason: str):
        super().__init__([FieldError(("image",), reason, "decode_failure")])


class InvalidQuestionId(SurveyError):
    def __init__(self, question_id):
        self.question_id = question_id
        super().__init__(f'Invalid question ID: "{question_id}"')
