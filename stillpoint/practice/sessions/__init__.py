from stillpoint.practice.sessions.breathing import BreathingSessionService
from stillpoint.practice.sessions.course_progress import CourseProgressService
from stillpoint.practice.sessions.meditation import MeditationSessionService

__all__ = ["BreathingSessionService", "CourseProgressService", "MeditationSessionService"]
