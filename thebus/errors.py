from enum import Enum


class SkillError(Exception):
    pass


class SlotErrorKind(str, Enum):
    MISSING = "missing"
    INVALID = "invalid"


class SlotError(SkillError):
    """
    The stop slot was absent or unusable.
    `raw` keeps the value as heard, for logs; it is never spoken.
    """

    def __init__(self, kind: SlotErrorKind, raw=None):
        super().__init__(f"{kind.value} stop slot: {raw!r}")
        self.kind = kind
        self.raw = raw


class FetchErrorKind(str, Enum):
    TRANSPORT = "transport"
    MALFORMED_FEED = "malformed_feed"


class FetchError(SkillError):
    def __init__(self, kind: FetchErrorKind, detail: str = ""):
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)
        self.kind = kind
        self.detail = detail


class UnknownIntentError(SkillError):
    def __init__(self, name: str):
        super().__init__(f"Unknown intent: {name}")
        self.name = name


class EnvelopeError(SkillError):
    """The host request envelope could not be turned into a Turn."""


class InvalidApplicationError(SkillError):
    def __init__(self, application_id: str | None):
        super().__init__(f"Invalid applicationId: {application_id}")
        self.application_id = application_id
