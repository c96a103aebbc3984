# errors.py - error taxonomy raised by the trip core and translated by the API


class RelevanTripError(Exception):
    """Base class; status_code is the HTTP status the API answers with."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RelevanTripError):
    status_code = 400


class NotFoundError(RelevanTripError):
    status_code = 404


class PreconditionError(RelevanTripError):
    """Operation attempted in an invalid state, e.g. export with no trip selected."""

    status_code = 409


class IndexOutOfRange(RelevanTripError):
    status_code = 400


class ExportError(RelevanTripError):
    status_code = 500


class ForbiddenError(RelevanTripError):
    status_code = 403
