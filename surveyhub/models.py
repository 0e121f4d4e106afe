from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    Boolean,
    ForeignKey,
)
from sqlalchemy.sql import func  # Für Default-Zeitstempel
from .database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Survey(Base):
    __tablename__ = "surveys"
    # Keine ORM-Beziehungen: Fragen, Sitzungen und Antworten laufen explizit über crud/

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(1000), nullable=False)
    # Wird einmalig beim Anlegen aus dem Titel erzeugt, nie beim Update
    slug = Column(String(1000), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    image = Column(String(255), nullable=True)  # relativer Pfad, z.B. images/abc.png
    status = Column(Boolean, nullable=False, default=False)
    expire_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), onupdate=func.now(), server_default=func.now()
    )


class SurveyQuestion(Base):
    __tablename__ = "survey_questions"

    id = Column(Integer, primary_key=True, index=True)
    survey_id = Column(Integer, ForeignKey("surveys.id"), nullable=False, index=True)
    type = Column(String(45), nullable=False)  # QuestionType-Wert
    question = Column(String(2000), nullable=False)
    description = Column(Text, nullable=True)
    data = Column(Text, nullable=True)  # kanonisches JSON des typabhängigen Payloads
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), onupdate=func.now(), server_default=func.now()
    )


class SurveyAnswer(Base):
    """One respondent's submission. Created once, never updated."""

    __tablename__ = "survey_answers"

    id = Column(Integer, primary_key=True, index=True)
    survey_id = Column(Integer, ForeignKey("surveys.id"), nullable=False, index=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)


class SurveyQuestionAnswer(Base):
    __tablename__ = "survey_question_answers"

    id = Column(Integer, primary_key=True, index=True)
    survey_question_id = Column(
        Integer, ForeignKey("survey_questions.id"), nullable=False, index=True
    )
    survey_answer_id = Column(
        Integer, ForeignKey("survey_answers.id"), nullable=False, index=True
    )
    answer = Column(Text, nullable=True)  # Skalar oder JSON-Text
    created_at = Column(DateTime(timezone=True), server_default=func.now())
