from pydantic import BaseModel, Field

from app.services.question_flow import QuestionSession


class SessionIn(BaseModel):
    question_number: int = Field(1, ge=1)
    answers: dict[str, str | list[str]] = {}
    previous_questions: list[str] = []
    themes: list[str] = []
    content_type: str = ""
    audience_location: str | None = None
    budget: float | None = None
    currency: str | None = None
    duration_days: int | None = None
    daily_budget: int | None = None
    complete: bool = False

    def to_domain(self) -> QuestionSession:
        return QuestionSession(
            question_number=self.question_number,
            answers={k: tuple(v) if isinstance(v, list) else v for k, v in self.answers.items()},
            previous_questions=tuple(self.previous_questions),
            themes=tuple(self.themes),
            content_type=self.content_type,
            audience_location=self.audience_location,
            budget=self.budget,
            currency=self.currency,
            duration_days=self.duration_days,
            daily_budget=self.daily_budget,
            complete=self.complete,
        )


class NextQuestionRequest(BaseModel):
    session: SessionIn = SessionIn()


class AnswerRequest(BaseModel):
    session: SessionIn = SessionIn()
    question_id: str = Field(min_length=1)
    answer: str | list[str]
    question_text: str | None = None
