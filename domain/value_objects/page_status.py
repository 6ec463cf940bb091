from enum import Enum


class PageStatus(str, Enum):
    """Enumerate the page-level states of the extraction state machine."""

    IDLE = "idle"
    PROCESSING = "processing"
    DONE = "done"
    ERROR = "error"
