from typing import List
from pydantic import Field, field_validator
from .common import CamelModel

RATING_FIELD_MESSAGES = {
    'specificityScore': 'All scores must be between 1 and 5',
    'constructivenessScore': 'All scores must be between 1 and 5',
    'relevanceScore': 'All scores must be between 1 and 5',
    'reviewId': 'Invalid rating format',
    'photoId': 'Invalid photo ID',
}

# Non-integer scores are malformed rather than out of range
RATING_TYPE_MESSAGES = {
    'int_from_float': 'Invalid rating format',
    'int_parsing': 'Invalid rating format',
    'int_type': 'Invalid rating format',
}


class ReviewRatingEntry(CamelModel):
    review_id: int = Field(gt=0)
    specificity_score: int = Field(ge=1, le=5)
    constructiveness_score: int = Field(ge=1, le=5)
    relevance_score: int = Field(ge=1, le=5)


class ReviewRatingSubmission(CamelModel):
    photo_id: int = Field(gt=0)
    ratings: List[ReviewRatingEntry] = Field(min_length=5, max_length=5)
    
    @field_validator('ratings')
    @classmethod
    def distinct_reviews(cls, value):
        if len({entry.review_id for entry in value}) != len(value):
            raise ValueError('Each review must be rated exactly once')
        return value
