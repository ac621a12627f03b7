from stillpoint.economy.content.service import ContentService

__all__ = ["ContentService"]
