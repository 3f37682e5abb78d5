"""
Exceptions shared by the scoring core, the batch pipeline and the web layer.
"""


class ServiceException(Exception):
    """Base exception for service layer errors."""
    status_code = 500


class NotFoundException(ServiceException):
    status_code = 404


class ContestNotFoundException(NotFoundException):
    """Raised when a contest id does not exist."""

    def __init__(self, contest_id):
        self.contest_id = contest_id
        super().__init__(f"Contest not found: {contest_id}")


class IdentityNotFoundException(NotFoundException):
    """Raised when a user id does not exist."""

    def __init__(self, user_id):
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


class IncompleteContestException(ServiceException):
    """Raised when an outcome or resolution is requested before the contest is final."""
    status_code = 409

    def __init__(self, contest_id, reason: str = "scores are incomplete"):
        self.contest_id = contest_id
        super().__init__(f"Contest {contest_id} cannot be scored: {reason}")


class OutcomeFrozenException(ServiceException):
    """Raised when a frozen outcome would be overwritten outside recompute_outcome()."""
    status_code = 409


class PrecedenceConflictException(ServiceException):
    """Raised when arbitration cannot pick a single active submission set."""
    status_code = 409

    def __init__(self, user_id, week: int, season: int, guest_emails):
        self.user_id = user_id
        self.week = week
        self.season = season
        self.guest_emails = sorted(guest_emails)
        super().__init__(
            f"User {user_id} has {len(self.guest_emails)} competing guest sets for "
            f"week {week}, season {season} ({', '.join(self.guest_emails)}); an override is required"
        )


class InvalidOverrideException(ServiceException):
    """Raised when an admin override request is malformed or names an invalid set."""
    status_code = 422


class TransientBatchFailure(ServiceException):
    """
    Per-contest failure inside a batch run.

    Never propagates out of BatchScheduler.resolve_period(); it is logged and
    recorded in the run summary.
    """

    def __init__(self, contest_id, cause: Exception):
        self.contest_id = contest_id
        self.cause = cause
        super().__init__(f"{cause.__class__.__name__}: {cause}")


class PipelineLockedException(ServiceException):
    """Raised when a batch run is already in progress."""
    status_code = 409
