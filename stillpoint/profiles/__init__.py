from stillpoint.profiles.service import ProfileService

__all__ = ["ProfileService"]
