# Re-export so "from garuda.utils import sanitize_string" works
from garuda.utils.sanitization import sanitize_string

__all__ = ["sanitize_string"]
