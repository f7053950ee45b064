import atexit
from typing import Dict, Optional
from apscheduler.schedulers.background import BackgroundScheduler
from doublevision.integrations import LinearClient
from doublevision.utils.context import utcnow
from config.config import Config
from doublevision.utils.logger import get_logger

logger = get_logger(__name__)

# Linear priorities: 1 urgent, 2 high, 3 medium
OFFENSIVE_PRIORITY = 1
DEFAULT_PRIORITY = 2


class AlertService:
    """Fire-and-forget moderation alerts to the ticketing queue.
    
    Alerts are handed to a background scheduler so the review response
    never waits on the ticketing API; failures are only logged.
    """
    
    def __init__(self, client=None, background: Optional[bool] = None):
        self.client = client or LinearClient()
        self.background = Config.ALERTS_IN_BACKGROUND if background is None else background
        self.scheduler = None
    
    def send_moderation_alert(self, alert: Dict) -> bool:
        """Queue an alert; returns True once it has been handed off"""
        if not self.background:
            self._file_alert(alert)
            return True
        
        scheduler = self._get_scheduler()
        scheduler.add_job(
            func=self._file_alert,
            trigger='date',
            args=[alert],
            id=f"moderation_alert_{alert.get('reviewId')}_{utcnow().timestamp()}"
        )
        return True
    
    def _get_scheduler(self) -> BackgroundScheduler:
        if self.scheduler is None:
            self.scheduler = BackgroundScheduler()
            self.scheduler.start()
            atexit.register(lambda: self.scheduler.shutdown(wait=False))
        return self.scheduler
    
    def _file_alert(self, alert: Dict):
        """Create the ticket; never raises"""
        try:
            title = (
                f"[Moderation] {alert['reason'].title()} review rejected "
                f"({alert['confidence']}% confidence)"
            )
            description = "\n".join([
                f"**Review:** {alert['reviewId']}",
                f"**Photo:** {alert['photoId']}",
                f"**Reviewer:** {alert['reviewerId']}",
                f"**Status:** {alert['moderationStatus']}",
                f"**Reason:** {alert['reason']}",
                f"**Confidence:** {alert['confidence']}%",
                f"**AI reasoning:** {alert['reasoning']}",
                "",
                "**Review text:**",
                f"> {alert['reviewText']}"
            ])
            priority = OFFENSIVE_PRIORITY if alert['reason'] == 'offensive' else DEFAULT_PRIORITY
            
            issue = self.client.create_issue(title, description, priority=priority)
            if issue:
                logger.info(f"Moderation alert filed for review {alert['reviewId']}: {issue.get('identifier')}")
            else:
                logger.error(f"Moderation alert for review {alert['reviewId']} was not filed")
                
        except Exception as e:
            logger.error(f"Failed to file moderation alert: {str(e)}")
