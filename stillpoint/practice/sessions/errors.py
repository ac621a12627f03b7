class SessionError(Exception):
    pass


class SessionNotFoundError(SessionError):
    pass


class SessionTransitionError(SessionError):
    pass


class SessionValidationError(SessionError):
    pass
