from datetime import datetime, timedelta
from typing import Dict, Optional
from doublevision.database import DatabaseManager, get_db
from doublevision.models import User
from doublevision.utils.context import utcnow
from config.config import Config
from doublevision.utils.logger import get_logger

logger = get_logger(__name__)


class StrikeService:
    """Per-user moderation strikes with a lazily expiring timeout.
    
    A user is clean (0 strikes), warned (1-2 strikes) or timed out
    (MAX_STRIKES with a future ``strike_timeout``). Expiry is never
    scheduled; every read and write re-derives state from the stored
    timestamps.
    """
    
    def __init__(self):
        self.user_db = DatabaseManager(User)
    
    def add_strike(self, user_id: int, now: Optional[datetime] = None) -> Dict:
        """Record a strike for a rejected review"""
        now = now or utcnow()
        
        with get_db() as db:
            user = db.query(User).filter_by(id=user_id).first()
            if not user:
                raise ValueError(f"User not found with id: {user_id}")
            
            # Timeout expired: this rejection is the first strike of a new cycle
            if user.strike_timeout and user.strike_timeout < now:
                user.strikes = 1
                user.strike_timeout = None
                user.last_strike_date = now
                logger.info(f"User {user_id} timeout expired, strike cycle restarted")
                return {'strikes': 1, 'isTimedOut': False}
            
            # Already timed out: no further strikes accumulate
            if user.strike_timeout and user.strike_timeout >= now:
                return {
                    'strikes': user.strikes or 0,
                    'isTimedOut': True,
                    'timeoutUntil': user.strike_timeout
                }
            
            new_strikes = (user.strikes or 0) + 1
            user.strikes = new_strikes
            user.last_strike_date = now
            
            if new_strikes >= Config.MAX_STRIKES:
                timeout_until = now + timedelta(days=Config.STRIKE_TIMEOUT_DAYS)
                user.strike_timeout = timeout_until
                logger.warning(
                    f"User {user_id} timed out until {timeout_until.isoformat()} ({new_strikes} strikes)"
                )
                return {
                    'strikes': new_strikes,
                    'isTimedOut': True,
                    'timeoutUntil': timeout_until
                }
            
            logger.warning(f"User {user_id} received strike {new_strikes}/{Config.MAX_STRIKES}")
            return {'strikes': new_strikes, 'isTimedOut': False}
    
    def is_user_timed_out(self, user_id: int, now: Optional[datetime] = None) -> Dict:
        """Check timeout state, clearing an expired timeout as a side effect"""
        now = now or utcnow()
        
        with get_db() as db:
            user = db.query(User).filter_by(id=user_id).first()
            if not user:
                return {'isTimedOut': False, 'strikes': 0}
            
            if user.strike_timeout and user.strike_timeout < now:
                user.strikes = 0
                user.strike_timeout = None
                user.last_strike_date = None
                logger.info(f"User {user_id} timeout expired, strikes reset")
                return {'isTimedOut': False, 'strikes': 0}
            
            if user.strike_timeout and user.strike_timeout >= now:
                return {
                    'isTimedOut': True,
                    'timeoutUntil': user.strike_timeout,
                    'strikes': user.strikes or 0
                }
            
            return {'isTimedOut': False, 'strikes': user.strikes or 0}
    
    def get_user_strikes(self, user_id: int, now: Optional[datetime] = None) -> Dict:
        """Strike status for display"""
        status = self.is_user_timed_out(user_id, now=now)
        user = self.user_db.get(user_id)
        
        result = {
            'strikes': status['strikes'],
            'isTimedOut': status['isTimedOut'],
            'maxStrikes': Config.MAX_STRIKES
        }
        if status.get('timeoutUntil'):
            result['timeoutUntil'] = status['timeoutUntil'].isoformat()
        if user and user.last_strike_date:
            result['lastStrikeDate'] = user.last_strike_date.isoformat()
        return result
    
    def reset_strikes(self, user_id: int) -> bool:
        """Clear strikes and timeout unconditionally"""
        user = self.user_db.update(
            user_id,
            strikes=0,
            strike_timeout=None,
            last_strike_date=None
        )
        if user:
            logger.info(f"Reset strikes for user {user_id}")
        return user is not None
