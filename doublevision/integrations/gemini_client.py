import requests
from typing import Optional
from config.config import Config
from config.moderator import build_moderation_prompt
from doublevision.utils.logger import get_logger

logger = get_logger(__name__)


class GeminiClient:
    """Wrapper for Gemini generateContent calls used as the review classifier"""
    
    def __init__(self, api_key: str = None, model: str = None, timeout: int = None):
        self.api_key = api_key or Config.GEMINI_API_KEY
        self.model = model or Config.GEMINI_MODEL
        self.timeout = timeout or Config.GEMINI_TIMEOUT_SECONDS
        self.base_url = "https://generativelanguage.googleapis.com/v1beta"
        self.headers = {
            'Content-Type': 'application/json'
        }
        
        if not self.api_key:
            logger.warning("GEMINI_API_KEY not configured. AI moderation will be disabled.")
    
    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)
    
    def generate(self, prompt: str) -> Optional[str]:
        """Send a prompt and return the first candidate's text.
        
        Raises requests.exceptions.RequestException on transport or HTTP
        errors so callers can choose their own fallback.
        """
        url = f"{self.base_url}/models/{self.model}:generateContent"
        data = {
            'contents': [{'parts': [{'text': prompt}]}],
            'generationConfig': {'responseMimeType': 'application/json'}
        }
        
        response = requests.post(
            url,
            params={'key': self.api_key},
            headers=self.headers,
            json=data,
            timeout=self.timeout
        )
        response.raise_for_status()
        payload = response.json()
        
        candidates = payload.get('candidates') or []
        if not candidates:
            return None
        parts = candidates[0].get('content', {}).get('parts') or []
        return ''.join(part.get('text', '') for part in parts).strip() or None
    
    def analyze(self, text: str) -> Optional[str]:
        """Classify a review comment; returns the raw JSON verdict text"""
        return self.generate(build_moderation_prompt(text))
