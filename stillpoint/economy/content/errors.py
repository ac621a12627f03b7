class ContentError(Exception):
    pass


class ContentNotFoundError(ContentError):
    pass


class InvalidContentTypeError(ContentError):
    pass


class ContentValidationError(ContentError):
    pass
