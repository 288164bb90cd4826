class ServiceError(ValueError):
    """Base class for business rule violations raised by the services."""

    code = "INTERNAL_ERROR"
    message = "internal error"

    def __init__(self, message: str = None):
        if message is not None:
            self.message = message
        super().__init__(self.code)


class NotFoundError(ServiceError):
    code = "NOT_FOUND"
    message = "resource not found"


class ConflictError(ServiceError):
    code = "CONFLICT"
    message = "conflict"


class TeamNotFound(NotFoundError):
    message = "team not found"


class AuthorNotFound(NotFoundError):
    message = "author not found"


class AuthorHasNoTeam(NotFoundError):
    message = "author is not in any team"


class PRNotFound(NotFoundError):
    message = "PR not found"


class UserNotFound(NotFoundError):
    message = "user not found"


class UserHasNoTeam(NotFoundError):
    message = "reviewer is not in any team"


class PRAlreadyExists(ConflictError):
    code = "PR_EXISTS"
    message = "PR id already exists"


class PRAlreadyMerged(ConflictError):
    code = "PR_MERGED"
    message = "cannot reassign on merged PR"


class ReviewerNotAssigned(ConflictError):
    code = "NOT_ASSIGNED"
    message = "reviewer is not assigned to this PR"
