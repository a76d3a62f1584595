"""
Error taxonomy for the demonlist.

Every rejection the core can produce is a subclass of ``DemonlistError``. Errors
are terminal: they describe invalid input or a policy violation, never a
transient fault, so nothing in the core retries them. Each error carries the
structured context a client needs to correct its request (see ``to_dict``).
"""
from typing import Any, Dict, Iterable, Optional


class DemonlistError(Exception):
    """Base class for all demonlist rejections."""

    error_code: int = 40000
    message: str = "Unspecified demonlist error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)

    def context(self) -> Dict[str, Any]:
        """Structured details attached to this error."""
        return {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.error_code,
            "message": str(self),
            "data": self.context(),
        }

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.context() == other.context()

    def __hash__(self) -> int:
        return hash((type(self), tuple(sorted(self.context().items()))))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.context()!r})"


# Input-shape errors

class InvalidRequirement(DemonlistError):
    error_code = 42212
    message = "Record requirement needs to be greater than -1 and smaller than 101"


class InvalidLevelId(DemonlistError):
    error_code = 42228
    message = "Level IDs need to be positive integers"


class InvalidEnjoymentRating(DemonlistError):
    error_code = 42227
    message = "Enjoyment ratings need to be between 0 and 10"


class MalformedRawUrl(DemonlistError):
    error_code = 42232
    message = "The provided raw footage URL is malformed"


class InvalidDifficulty(DemonlistError):
    error_code = 42234

    def __init__(self, value: str, accepted: Iterable[str]):
        self.value = value
        self.accepted = tuple(accepted)
        super().__init__(
            f"Invalid difficulty '{value}', expected one of: {', '.join(self.accepted)}"
        )

    def context(self) -> Dict[str, Any]:
        return {"value": self.value, "accepted": self.accepted}


class InvalidRecordStatus(DemonlistError):
    error_code = 42235

    def __init__(self, value: str, accepted: Iterable[str]):
        self.value = value
        self.accepted = tuple(accepted)
        super().__init__(
            f"Invalid record status '{value}', expected one of: {', '.join(self.accepted)}"
        )

    def context(self) -> Dict[str, Any]:
        return {"value": self.value, "accepted": self.accepted}


# State-conflict errors

class InvalidPosition(DemonlistError):
    error_code = 42213

    def __init__(self, maximal: int):
        self.maximal = maximal
        super().__init__(f"Demon position needs to be greater than or equal to 1 and smaller than or equal to {maximal}")

    def context(self) -> Dict[str, Any]:
        return {"maximal": self.maximal}


class InvalidProgress(DemonlistError):
    error_code = 42215

    def __init__(self, requirement: int):
        self.requirement = requirement
        super().__init__(f"Record progress must lie between {requirement} and 100%")

    def context(self) -> Dict[str, Any]:
        return {"requirement": self.requirement}


# Policy errors

class PlayerBanned(DemonlistError):
    error_code = 40302
    message = "The player you're trying to submit for is banned"


class SubmitLegacy(DemonlistError):
    error_code = 42217
    message = "Cannot submit records for demons on the legacy list"


class Non100Extended(DemonlistError):
    error_code = 42218
    message = "Only 100% records can be submitted for demons on the extended list"


class RawFootageRequired(DemonlistError):
    error_code = 42231
    message = "Raw footage is required for record submissions"


# Lookup errors

class NotFound(DemonlistError):
    error_code = 40400
    resource: str = "object"

    def __init__(self, key: Any):
        self.key = key
        super().__init__(f"No {self.resource} with id {key} found")

    def context(self) -> Dict[str, Any]:
        return {"key": self.key}


class DemonNotFound(NotFound):
    error_code = 40401
    resource = "demon"


class PlayerNotFound(NotFound):
    error_code = 40402
    resource = "player"


class RecordNotFound(NotFound):
    error_code = 40403
    resource = "record"


# Video errors, raised by the video validation collaborator

class VideoError(DemonlistError):
    error_code = 42220
    message = "Invalid video"


class MalformedVideoUrl(VideoError):
    error_code = 42221
    message = "The given video URL is malformed"


class UnsupportedVideoHost(VideoError):
    error_code = 42222

    def __init__(self, host: str):
        self.host = host
        super().__init__(f"Unsupported video host '{host}'")

    def context(self) -> Dict[str, Any]:
        return {"host": self.host}
