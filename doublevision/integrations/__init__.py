from .gemini_client import GeminiClient
from .linear_client import LinearClient

__all__ = ['GeminiClient', 'LinearClient']
