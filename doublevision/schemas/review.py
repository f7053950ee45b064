from datetime import datetime
from typing import Optional
from pydantic import Field, field_validator
from doublevision.utils.validators import validate_review_comment
from .common import CamelModel

REVIEW_REQUIRED_FIELDS = ('photoId', 'score', 'comment')

REVIEW_FIELD_MESSAGES = {
    'photoId': 'Invalid photo ID',
    'score': 'Score must be a whole number between 0 and 100',
}


class ReviewSubmission(CamelModel):
    photo_id: int = Field(gt=0)
    score: int = Field(ge=0, le=100)
    comment: str
    
    @field_validator('comment')
    @classmethod
    def clean_comment(cls, value: str) -> str:
        valid, error, sanitized, _ = validate_review_comment(value)
        if not valid:
            raise ValueError(error)
        return sanitized


class ModerationAnalysis(CamelModel):
    """Structured verdict returned by the classifier"""
    is_offensive: bool = False
    is_ai_generated: bool = False
    is_relevant: bool = True
    confidence: int = Field(default=0, ge=0, le=100)
    reasoning: str = ''
    
    @field_validator('confidence', mode='before')
    @classmethod
    def round_confidence(cls, value):
        if isinstance(value, float):
            return round(value)
        return value
    
    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class ModerationOutcome(CamelModel):
    status: str
    strikes: Optional[int] = None
    is_timed_out: Optional[bool] = None
    timeout_until: Optional[datetime] = None
