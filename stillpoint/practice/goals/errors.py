class GoalError(Exception):
    pass


class GoalNotFoundError(GoalError):
    pass


class GoalValidationError(GoalError):
    pass
