class CoachError(Exception):
    """Base class for errors raised by the coach services."""


class AdapterUnavailable(CoachError):
    """No AI credentials or client library; callers use the fallbacks."""


class MalformedResponse(CoachError):
    """The model answered, but without a usable JSON analysis."""


class QuotaExceeded(CoachError):
    def __init__(self, limit: int):
        super().__init__(
            f"Daily limit of {limit} practice sessions reached. Upgrade to Pro for unlimited practice."
        )
        self.limit = limit


class AuthenticationError(CoachError):
    pass


class UserExists(CoachError):
    pass


class SessionNotFound(CoachError):
    pass
