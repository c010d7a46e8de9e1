# errors.py
"""Typed failures raised by the Harper core.

Each class carries a ``kind`` tag so callers can branch on the failure category
without inspecting message text.
"""

from __future__ import annotations

from typing import Optional, Sequence


class HarperError(Exception):
    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationMissing(HarperError):
    kind = "configuration_missing"


class MissingTeam(ConfigurationMissing):
    def __init__(self, message: str = "No Linear team configured. Set LINEAR_TEAM_ID.") -> None:
        super().__init__(message)


class RemoteAPIFault(HarperError):
    kind = "remote_api_fault"

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResolutionFailure(HarperError):
    """A free-text value could not be matched against the valid options."""

    kind = "resolution_failure"

    def __init__(self, message: str, options: Sequence[str] = ()) -> None:
        self.options = list(options)
        if self.options:
            message = f"{message} Available options: {', '.join(self.options)}"
        super().__init__(message)


class NoOptionsAvailable(ResolutionFailure):
    pass


class UnresolvedOption(ResolutionFailure):
    pass


class UnknownField(ResolutionFailure):
    pass


class StatusResolutionFailed(ResolutionFailure):
    pass


class AssigneeResolutionFailed(ResolutionFailure):
    pass


class PriorityNotRecognized(ResolutionFailure):
    pass


class ParseAmbiguous(HarperError):
    kind = "parse_ambiguous"


class MissingTitle(ParseAmbiguous):
    def __init__(self, message: str = "Please provide a title for the card.") -> None:
        super().__init__(message)


class NotFound(HarperError):
    kind = "not_found"


class CardNotFound(NotFound):
    def __init__(self, identifier: str) -> None:
        super().__init__(f'No Linear card found matching "{identifier}".')
        self.identifier = identifier
