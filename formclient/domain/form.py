# formclient/domain/form.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

URLENCODED_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class FormField:
    key: str
    value: str

    def as_pair(self) -> tuple[str, str]:
        return (self.key, self.value)


class EncodingMode(Enum):
    UNDECIDED = "undecided"
    URLENCODED = "urlencoded"
    MULTIPART = "multipart"


class ModeEvent(Enum):
    FORCE_MULTIPART = "force_multipart"
    FINALIZE = "finalize"


def transition(mode: EncodingMode, event: ModeEvent, has_fields: bool = False) -> EncodingMode:
    """
    Body encoding ratchet.

    - FORCE_MULTIPART moves any mode to MULTIPART (terminal).
    - FINALIZE turns UNDECIDED into URLENCODED only when fields were buffered.
    - Nothing ever leaves MULTIPART.
    """
    if mode is EncodingMode.MULTIPART:
        return mode
    if event is ModeEvent.FORCE_MULTIPART:
        return EncodingMode.MULTIPART
    if event is ModeEvent.FINALIZE and mode is EncodingMode.UNDECIDED and has_fields:
        return EncodingMode.URLENCODED
    return mode


def as_text(value: Any) -> str:
    # None is an empty field, not "None"
    return "" if value is None else str(value)


def urlencoded_content_type(mode: EncodingMode) -> Optional[str]:
    if mode is EncodingMode.URLENCODED:
        return URLENCODED_CONTENT_TYPE
    return None
