# Config module — re-export so "from garuda.core.config import settings" gets the instance
from garuda.core.config.settings import Environment, settings

__all__ = ["Environment", "settings"]
