class DomainError(Exception):
    """Base class for reservation-side domain errors."""


class InvalidReservationError(DomainError):
    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__("; ".join(problems))


class SlotUnavailableError(DomainError):
    pass


class ReservationNotFoundError(DomainError):
    pass


class InvalidReviewError(DomainError):
    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__("; ".join(problems))


class NotificationError(Exception):
    """Error raised inside the confirmation pipeline, carrying its HTTP status."""

    status_code = 500


class ValidationError(NotificationError):
    status_code = 400


class FormatError(NotificationError):
    status_code = 422


class MethodError(NotificationError):
    status_code = 405


class ConfigurationError(NotificationError):
    status_code = 500


class ProviderError(NotificationError):
    status_code = 500
