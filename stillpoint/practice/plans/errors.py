class PracticePlanError(Exception):
    pass


class PracticePlanValidationError(PracticePlanError):
    pass


class PracticePlanNotFoundError(PracticePlanError):
    pass
