class KinematicsError(Exception):
    """ Base class for every error raised by attkinpy """


class NotEnoughDataError(KinematicsError):
    def __init__(self, required: int, actual: int) -> None:
        self.required = required
        self.actual = actual
        super().__init__(f"not enough data for interpolation: required {required}, got {actual}")


class MalformedInputError(KinematicsError, ValueError):
    pass


class MismatchedFieldError(MalformedInputError):
    def __init__(self, first, second) -> None:
        self.first = first
        self.second = second
        super().__init__(f"operands belong to different fields: {first} and {second}")
