from .common import CamelModel, first_error
from .review import ReviewSubmission, ModerationAnalysis, ModerationOutcome
from .rating import ReviewRatingEntry, ReviewRatingSubmission

__all__ = [
    'CamelModel', 'first_error',
    'ReviewSubmission', 'ModerationAnalysis', 'ModerationOutcome',
    'ReviewRatingEntry', 'ReviewRatingSubmission'
]
