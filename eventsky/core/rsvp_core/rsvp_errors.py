"""Error types raised by rsvp_core."""

from __future__ import annotations


class RsvpError(RuntimeError):
    """Base class for EventSky failures."""


class ConfigError(RsvpError):
    pass


class IndexQueryError(RsvpError):
    """The event index answered with errors or garbage."""


class StorageUploadError(RsvpError):
    """The content storage service rejected or failed the upload."""


class DraftValidationError(RsvpError):
    """A required draft field is missing or malformed."""

    def __init__(self, problems: list[str]) -> None:
        super().__init__("; ".join(problems))
        self.problems = problems


class ContractCallError(RsvpError):
    """The createNewEvent transaction failed or was reverted."""


class EventLogMissingError(RsvpError):
    """The mined receipt carries no NewEventCreated log."""
