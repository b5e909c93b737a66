"""Write-path services."""

from biolink.application.services.ai_page_service import AIPageService
from biolink.application.services.profile_service import ProfileService

__all__ = ["ProfileService", "AIPageService"]
