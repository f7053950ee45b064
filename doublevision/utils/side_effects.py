from dataclasses import dataclass
from typing import Any, Callable, Optional
from doublevision.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class EffectResult:
    """Outcome of an auxiliary effect that must never fail its caller"""
    name: str
    ok: bool
    value: Any = None
    error: Optional[str] = None


def best_effort(name: str, func: Callable, *args, **kwargs) -> EffectResult:
    """Run func, logging and capturing any failure instead of raising"""
    try:
        return EffectResult(name=name, ok=True, value=func(*args, **kwargs))
    except Exception as e:
        logger.error(f"Auxiliary effect '{name}' failed: {str(e)}")
        return EffectResult(name=name, ok=False, error=str(e))
