from .logger import setup_logger, get_logger
from .context import RequestContext, utcnow
from .security import generate_token, verify_token
from .validators import sanitize_comment, count_words, validate_review_comment
from .side_effects import EffectResult, best_effort

__all__ = [
    'setup_logger', 'get_logger',
    'RequestContext', 'utcnow',
    'generate_token', 'verify_token',
    'sanitize_comment', 'count_words', 'validate_review_comment',
    'EffectResult', 'best_effort'
]
