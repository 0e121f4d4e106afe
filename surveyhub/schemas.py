from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .question_validation import decode_question_data


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive timestamps (SQLite gives those back) are treated as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# --- Schemas für Benutzer / Auth ---


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("email must be a valid email address")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str
    remember: bool = False

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserOut(BaseModel):
    id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    user: UserOut
    token: str


# --- Schemas für Umfrage-Definition ---


class QuestionIn(BaseModel):
    """A submitted question. Shape checks per type happen in question_validation."""

    # int für gespeicherte Fragen, String (z.B. UUID) für neue aus dem Frontend
    id: Optional[Union[int, str]] = None
    question: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    data: Any = None


class SurveyIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=1000)
    description: Optional[str] = None
    expire_date: Optional[datetime] = None
    # Pflichtfelder: ein fehlendes Feld darf Fragen/Status nicht still zurücksetzen
    status: bool
    image: Optional[str] = None  # data:image/...;base64,...
    questions: List[QuestionIn]

    @field_validator("expire_date", mode="before")
    @classmethod
    def parse_plain_date(cls, v):
        if isinstance(v, str) and len(v) == 10:
            v = date.fromisoformat(v)
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime(v.year, v.month, v.day, tzinfo=timezone.utc)
        return v

    @field_validator("expire_date")
    @classmethod
    def expire_date_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)

    def survey_fields(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "expire_date": self.expire_date,
            "status": self.status,
        }

    def question_payloads(self) -> List[Dict[str, Any]]:
        # exclude_unset, damit ein fehlendes "data" erkannt wird
        return [q.model_dump(exclude_unset=True) for q in self.questions]


class SurveyCreate(SurveyIn):
    pass


class SurveyUpdate(SurveyIn):
    pass


class QuestionOut(BaseModel):
    id: int
    type: str
    question: str
    description: Optional[str] = None
    data: Any = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("data", mode="before")
    @classmethod
    def decode_data(cls, v):
        return decode_question_data(v) if isinstance(v, str) else v


class SurveyOut(BaseModel):
    id: int
    title: str
    slug: str
    status: bool
    image_url: Optional[str] = None
    description: Optional[str] = None
    expire_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    questions: List[QuestionOut] = []


class PageMeta(BaseModel):
    current_page: int
    last_page: int
    per_page: int
    total: int


class SurveyPage(BaseModel):
    data: List[SurveyOut]
    meta: PageMeta


# --- Schemas für Antworten ---


class AnswerSubmission(BaseModel):
    # Schlüssel: Frage-ID, Wert: Skalar oder Liste/Objekt
    answers: Dict[str, Any]

    @field_validator("answers")
    @classmethod
    def answers_not_empty(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        if not v:
            raise ValueError("at least one answer is required")
        return v
