# API endpoints
from . import auth, sessions, builder, billing, content, health

__all__ = ["auth", "sessions", "builder", "billing", "content", "health"]
