"""Validation of a single question against its declared type.

Everything in here is pure: no database, no HTTP. Per-type payload rules live
in ``PAYLOAD_RULES`` so they can be enumerated and tested on their own.
"""
import enum
import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .errors import FieldError, QuestionValidationError


class QuestionType(str, enum.Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    RATING = "rating"


RATING_SCALE_MIN = 2
RATING_SCALE_MAX = 10

# (relative loc, message)
PayloadProblem = Tuple[Tuple[Any, ...], str]


def is_empty_payload(data: Any) -> bool:
    return data is None or data == "" or data == {} or data == []


def _check_free_text(data: Any) -> List[PayloadProblem]:
    if is_empty_payload(data):
        return []
    if not isinstance(data, dict):
        return [((), "data must be an object or empty")]
    placeholder = data.get("placeholder")
    if placeholder is not None and not isinstance(placeholder, str):
        return [(("placeholder",), "placeholder must be a string")]
    return []


def _check_options(data: Any) -> List[PayloadProblem]:
    if not isinstance(data, dict):
        return [((), "data must be an object with an options list")]
    options = data.get("options")
    if not isinstance(options, list) or not options:
        return [(("options",), "at least one option is required")]

    problems = []
    for i, option in enumerate(options):
        text = option.get("text") if isinstance(option, dict) else option
        if not isinstance(text, str) or not text.strip():
            problems.append((("options", i), "option text must be a non-empty string"))
    return problems


def _check_rating(data: Any) -> List[PayloadProblem]:
    if not isinstance(data, dict):
        return [((), "data must be an object with a numeric scale")]
    scale = data.get("scale")
    # bool ist eine int-Unterklasse, zählt hier aber nicht
    if isinstance(scale, bool) or not isinstance(scale, int):
        return [(("scale",), "scale must be an integer")]
    if not RATING_SCALE_MIN <= scale <= RATING_SCALE_MAX:
        return [
            (
                ("scale",),
                f"scale must be between {RATING_SCALE_MIN} and {RATING_SCALE_MAX}",
            )
        ]
    return []


PAYLOAD_RULES: Dict[QuestionType, Callable[[Any], List[PayloadProblem]]] = {
    QuestionType.TEXT: _check_free_text,
    QuestionType.TEXTAREA: _check_free_text,
    QuestionType.SELECT: _check_options,
    QuestionType.RADIO: _check_options,
    QuestionType.CHECKBOX: _check_options,
    QuestionType.RATING: _check_rating,
}


def encode_question_data(data: Any) -> Optional[str]:
    """Canonical text form of a payload; ``None`` stays ``None``."""
    if data is None:
        return None
    return json.dumps(data, sort_keys=True, ensure_ascii=False)


def decode_question_data(text: Optional[str]) -> Any:
    if text is None:
        return None
    try:
        return json.loads(text)
    except ValueError:
        # Zeilen, die nicht über encode_question_data geschrieben wurden
        return text


@dataclass(frozen=True)
class ValidatedQuestion:
    question: str
    type: QuestionType
    description: Optional[str]
    data: Optional[str]

    def as_columns(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "type": self.type.value,
            "description": self.description,
            "data": self.data,
        }


def validate_question(
    raw: Mapping[str, Any], loc_prefix: Tuple[Any, ...] = ()
) -> ValidatedQuestion:
    """Validate one question mapping and normalise its payload.

    Raises QuestionValidationError listing every field problem found; locations
    are prefixed with ``loc_prefix`` (e.g. ``("questions", 3)``).
    """
    errors: List[FieldError] = []

    question = raw.get("question")
    if not isinstance(question, str) or not question.strip():
        errors.append(
            FieldError(loc_prefix + ("question",), "question is required", "missing")
        )

    qtype = None
    raw_type = raw.get("type")
    if raw_type is None:
        errors.append(FieldError(loc_prefix + ("type",), "type is required", "missing"))
    else:
        try:
            qtype = QuestionType(raw_type)
        except ValueError:
            allowed = ", ".join(t.value for t in QuestionType)
            errors.append(
                FieldError(
                    loc_prefix + ("type",),
                    f"type must be one of: {allowed}",
                    "invalid_enum_value",
                )
            )

    description = raw.get("description")
    if description is not None and not isinstance(description, str):
        errors.append(
            FieldError(
                loc_prefix + ("description",), "description must be a string", "type_error"
            )
        )

    if "data" not in raw:
        errors.append(FieldError(loc_prefix + ("data",), "data must be present", "missing"))
    elif qtype is not None:
        for rel_loc, msg in PAYLOAD_RULES[qtype](raw["data"]):
            errors.append(FieldError(loc_prefix + ("data",) + rel_loc, msg, "invalid_payload"))

    if errors:
        raise QuestionValidationError(errors)

    return ValidatedQuestion(
        question=question.strip(),
        type=qtype,
        description=description,
        data=encode_question_data(raw["data"]),
    )
