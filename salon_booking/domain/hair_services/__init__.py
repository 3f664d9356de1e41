"""Hair services domain - Services, categories and add-ons"""

from .router import router

__all__ = ["router"]
