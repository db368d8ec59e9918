from typing import Optional


class FrontDeskError(Exception):
    """Base class for errors raised by the front desk services."""


class PreconditionError(FrontDeskError):
    """A required request field is missing. Nothing remote has been called."""


class NotFoundError(FrontDeskError):
    """The remote entity does not exist."""


class RemoteFailure(FrontDeskError):
    """A collaborator answered with a non-success status or could not be reached."""

    def __init__(self, service: str, detail: str, status_code: Optional[int] = None):
        self.service = service
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"{service} request failed ({status_code}): {detail}")


class SchemaMismatchError(FrontDeskError):
    """A collaborator response does not match the documented schema."""

    def __init__(self, service: str, detail: str):
        self.service = service
        self.detail = detail
        super().__init__(f"Unexpected {service} response: {detail}")
