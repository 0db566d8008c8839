# Productivity API
from productivity.api.router import api_router

__all__ = ["api_router"]
