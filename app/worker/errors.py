# app/worker/errors.py


class SchedulerError(Exception):
    """Base for every error raised inside the upcoming-event sweep."""


class ParseError(SchedulerError):
    """A reminder or special date row has a malformed date/time. Skip the row."""

    def __init__(self, record_id, detail: str):
        self.record_id = record_id
        self.detail = detail
        super().__init__(f"record {record_id}: {detail}")


class UserLookupError(SchedulerError):
    """User settings or user email could not be read."""


class DispatchError(SchedulerError):
    """The email collaborator failed or answered with a non-2xx status."""


class PersistenceError(SchedulerError):
    """The in-app notification row could not be inserted."""


class FatalError(SchedulerError):
    """One of the bulk reads failed; the whole run is aborted."""
