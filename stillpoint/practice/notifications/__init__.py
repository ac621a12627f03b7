from stillpoint.practice.notifications.service import NotificationService

__all__ = ["NotificationService"]
