# ============================================================================
# letters/classifier.py - Decide what to do with each MIME part
# ============================================================================

from dataclasses import dataclass
from enum import Enum
from typing import Collection, Optional

from .config import ProcessingMode, config
from .content_info import is_attached_file, is_inline_file, is_multipart, is_text
from .errors import LettersError, MissingBoundaryError, UnknownContentTypeError
from .models import ContentInfo


class PartAction(str, Enum):
    RECURSE = "recurse"
    TEXT = "text"
    INLINE_FILE = "inline_file"
    ATTACHMENT_FILE = "attachment_file"
    SKIP = "skip"
    ERROR = "error"


@dataclass(frozen=True)
class Decision:
    action: PartAction
    reason: str = ""
    error: Optional[LettersError] = None
    # ignorable type, reported in the log
    diagnostic: bool = False


def _file_decision(action: PartAction, mode: ProcessingMode, reason: str) -> Decision:
    if mode != ProcessingMode.FULL:
        return Decision(PartAction.SKIP, f"{reason} skipped in {mode.value} mode")
    return Decision(action, reason)


def classify(
    content_info: ContentInfo,
    mode: ProcessingMode = ProcessingMode.FULL,
    skip_content_types: Collection[str] = (),
    ignored_content_types: Optional[Collection[str]] = None,
) -> Decision:
    """
    Classify one part. The checks run in a fixed order: skip-list,
    attachment disposition, text, multipart, inline file, attached file,
    ignorable types; anything left over is an unknown content type.
    """
    ctype = content_info.type
    if ignored_content_types is None:
        ignored_content_types = config.IGNORED_CONTENT_TYPES

    if ctype in skip_content_types:
        return Decision(PartAction.SKIP, "content type in skip list")

    if content_info.disposition == "attachment":
        return _file_decision(PartAction.ATTACHMENT_FILE, mode, "attachment disposition")

    if is_text(content_info):
        return Decision(PartAction.TEXT, ctype)

    if is_multipart(content_info):
        if not content_info.boundary:
            return Decision(PartAction.ERROR, "missing boundary", MissingBoundaryError(ctype))
        return Decision(PartAction.RECURSE, content_info.boundary)

    if is_inline_file(content_info):
        return _file_decision(PartAction.INLINE_FILE, mode, "inline file")

    if is_attached_file(content_info):
        return _file_decision(PartAction.ATTACHMENT_FILE, mode, "attached file")

    if ctype in ignored_content_types:
        return Decision(PartAction.SKIP, f"skipping {ctype} content-type", diagnostic=True)

    return Decision(PartAction.ERROR, "unknown content type", UnknownContentTypeError(ctype))
