# database/exceptions.py
"""
Errors raised by the database layer when a request conflicts with stored state.
"""


class RecordNotFoundError(LookupError):
    """Base class for lookups of ids that do not exist."""


class SiteNotFoundError(RecordNotFoundError):
    def __init__(self, site_id):
        self.site_id = site_id
        super().__init__(f"Site '{site_id}' not found.")


class AlertNotFoundError(RecordNotFoundError):
    def __init__(self, alert_id):
        self.alert_id = alert_id
        super().__init__(f"Alert '{alert_id}' not found.")


class AlertAlreadyAcknowledgedError(ValueError):
    """Acknowledgment is a one-way transition; a second attempt is an invalid-state error."""

    def __init__(self, alert_id):
        self.alert_id = alert_id
        super().__init__(f"Alert '{alert_id}' is already acknowledged.")


class DuplicateUserError(ValueError):
    def __init__(self, email):
        self.email = email
        super().__init__(f"A user with email '{email}' already exists.")
