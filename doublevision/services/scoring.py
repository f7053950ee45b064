"""
Pure reputation and moderation primitives.

Nothing here touches storage; services feed in the stored values and
persist whatever comes back.
"""
from typing import Dict, Optional
from config.config import Config
from config.moderator import MODERATOR_THRESHOLDS

APPROVED = 'approved'
REJECTED = 'rejected'


def _confidence_factor(ai_confidence: float) -> float:
    """Scale 0-100 confidence into a 0.5-1.0 multiplier"""
    confidence = max(0.0, min(100.0, float(ai_confidence or 0)))
    return 0.5 + confidence / 200


def calculate_new_elo(current_elo: int, review_approved: bool,
                      ai_confidence: float, word_count: int) -> int:
    """Reward approved, confident, substantive reviews; penalize rejected ones.
    
    The result is never clamped, so repeated rejections can take a rating
    below zero.
    """
    factor = _confidence_factor(ai_confidence)
    
    if review_approved:
        words = min(max(int(word_count or 0), 0), Config.ELO_WORD_CAP)
        change = round(Config.ELO_APPROVAL_GAIN * factor + words / Config.ELO_WORDS_PER_POINT)
    else:
        change = -round(Config.ELO_REJECTION_LOSS * factor)
    
    return int(current_elo) + int(change)


def overall_quality(specificity: int, constructiveness: int, relevance: int) -> float:
    """Mean of the three quality dimensions"""
    return (specificity + constructiveness + relevance) / 3


def quality_elo_change(quality: float) -> int:
    """Map a 1-5 quality mean onto -30..+30, with 3 as neutral"""
    return round((quality - Config.QUALITY_NEUTRAL_SCORE) * Config.QUALITY_ELO_MULTIPLIER)


def get_moderation_decision(analysis: Dict, thresholds: Optional[Dict] = None) -> str:
    """Approve unless offensive or irrelevant with enough confidence.
    
    The AI-generated flag is recorded but never rejects on its own.
    """
    thresholds = thresholds or MODERATOR_THRESHOLDS
    confidence = analysis.get('confidence', 0) or 0
    
    if analysis.get('isOffensive') and confidence >= thresholds['offensive_confidence']:
        return REJECTED
    
    if analysis.get('isRelevant') is False and confidence >= thresholds['irrelevance_confidence']:
        return REJECTED
    
    return APPROVED


def should_alert(status: str, confidence: float, thresholds: Optional[Dict] = None) -> bool:
    """High-confidence rejections are escalated to the ticketing queue"""
    thresholds = thresholds or MODERATOR_THRESHOLDS
    return status == REJECTED and (confidence or 0) >= thresholds['alert_confidence']


def rejection_reason(analysis: Dict) -> str:
    if analysis.get('isOffensive'):
        return 'offensive'
    if analysis.get('isRelevant') is False:
        return 'irrelevant'
    return 'ai-generated'
