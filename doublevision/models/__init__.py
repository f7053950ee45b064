from .user import User
from .photo import Photo
from .assignment import ReviewAssignment
from .review import Review
from .review_rating import ReviewRating

__all__ = [
    'User', 'Photo', 'ReviewAssignment', 'Review', 'ReviewRating'
]
