import json
import re
import requests
from typing import Dict
from pydantic import ValidationError
from doublevision.integrations import GeminiClient
from doublevision.schemas import ModerationAnalysis
from doublevision.services.scoring import get_moderation_decision
from doublevision.utils.logger import get_logger

logger = get_logger(__name__)

CODE_FENCE = re.compile(r'```(?:json)?\s*')


def neutral_analysis(confidence: int, reasoning: str) -> Dict:
    """Analysis used whenever the classifier cannot give a verdict"""
    return ModerationAnalysis(confidence=confidence, reasoning=reasoning).to_document()


class ModerationService:
    """Classifies review text and turns the verdict into a decision"""
    
    def __init__(self, client=None, thresholds: Dict = None):
        self.client = client or GeminiClient()
        self.thresholds = thresholds
    
    def analyze(self, text: str) -> Dict:
        """Classify text, falling back to approval-leaning defaults on any classifier fault"""
        if not getattr(self.client, 'is_configured', True):
            return neutral_analysis(0, "Moderation disabled - API key not configured")
        
        try:
            raw = self.client.analyze(text)
        except requests.exceptions.RequestException as e:
            logger.error(f"Classifier request failed: {str(e)}")
            return neutral_analysis(0, "Moderation error - defaulting to approval for safety")
        
        if isinstance(raw, dict):
            raw = json.dumps(raw)
        
        try:
            cleaned = CODE_FENCE.sub('', raw or '').strip()
            return ModerationAnalysis.model_validate_json(cleaned).to_document()
        except ValidationError:
            logger.error(f"Failed to parse classifier response: {raw}")
            return neutral_analysis(50, "Failed to parse AI response, defaulting to approval")
    
    def decide(self, analysis: Dict) -> str:
        return get_moderation_decision(analysis, self.thresholds)
