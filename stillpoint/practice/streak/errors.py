class StreakValidationError(Exception):
    pass
