import re
from typing import Optional, Tuple
from config.config import Config

TAG_PATTERN = re.compile(r'<[^>]*>')
CONTROL_PATTERN = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')
WHITESPACE_PATTERN = re.compile(r'\s+')


def sanitize_comment(comment: str) -> str:
    """Strip markup and control characters and collapse whitespace"""
    cleaned = TAG_PATTERN.sub('', comment)
    cleaned = CONTROL_PATTERN.sub('', cleaned)
    return WHITESPACE_PATTERN.sub(' ', cleaned).strip()


def count_words(text: str) -> int:
    """Count whitespace-separated words"""
    return len(text.split())


def validate_review_comment(comment: str) -> Tuple[bool, Optional[str], str, int]:
    """Validate and sanitize a review comment.
    
    Returns (valid, error, sanitized, word_count).
    """
    if not isinstance(comment, str) or not comment.strip():
        return False, "Comment is required", '', 0
    
    sanitized = sanitize_comment(comment)
    word_count = count_words(sanitized)
    
    if len(sanitized) > Config.MAX_REVIEW_LENGTH:
        return False, f"Comment must be at most {Config.MAX_REVIEW_LENGTH} characters", sanitized, word_count
    if word_count < Config.MIN_REVIEW_WORDS:
        return (
            False,
            f"Comment must be at least {Config.MIN_REVIEW_WORDS} words. Current: {word_count} words.",
            sanitized,
            word_count
        )
    return True, None, sanitized, word_count
