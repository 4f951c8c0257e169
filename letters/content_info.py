# ============================================================================
# letters/content_info.py - Content-Type / Content-Disposition extraction
# ============================================================================

from email.message import Message
from email.utils import collapse_rfc2231_value
from typing import Dict, Optional, Tuple

from .models import ContentInfo
from .reader import HeaderMap

TEXT_TYPES = ("text/plain", "text/enriched", "text/html")

# Primary types treated as files when a part has no disposition
BINARY_PRIMARY_TYPES = ("application", "image", "audio", "video", "font", "model", "message")

_ID_TRIM = "<> \n"


def _parse_params(header_name: str, raw: str) -> Tuple[str, Dict[str, str]]:
    """Split a structured header into its lowercased value and parameters."""
    msg = Message()
    msg[header_name] = raw
    params = msg.get_params(header=header_name.lower()) or []
    if not params:
        return "", {}
    value = params[0][0].strip().lower()
    result: Dict[str, str] = {}
    for key, param_value in params[1:]:
        key = key.strip().lower()
        if not key:
            continue
        # RFC 2231 values arrive as (charset, language, text) tuples
        result[key] = collapse_rfc2231_value(param_value).strip()
    return value, result


def extract_content_info(headers: HeaderMap, parent: Optional[ContentInfo] = None) -> ContentInfo:
    """
    Build the ContentInfo of a message or part from its headers.

    Missing or malformed Content-Type headers default to text/plain
    (message/rfc822 inside multipart/digest). charset and transfer encoding
    are inherited from parent when the part does not declare its own.
    """
    content_type = ""
    type_params: Dict[str, str] = {}
    raw_type = headers.get("Content-Type").strip()
    if raw_type:
        content_type, type_params = _parse_params("Content-Type", raw_type)
    if content_type.count("/") != 1 or not all(content_type.split("/")):
        if parent is not None and parent.type == "multipart/digest":
            content_type = "message/rfc822"
        else:
            content_type = "text/plain"

    disposition = ""
    disposition_params: Dict[str, str] = {}
    raw_disposition = headers.get("Content-Disposition").strip()
    if raw_disposition:
        disposition, disposition_params = _parse_params("Content-Disposition", raw_disposition)

    transfer_encoding = headers.get("Content-Transfer-Encoding").strip().lower()
    charset = type_params.get("charset", "").strip().lower()
    if parent is not None:
        transfer_encoding = transfer_encoding or parent.transfer_encoding
        charset = charset or parent.charset

    return ContentInfo(
        type=content_type,
        type_params=type_params,
        disposition=disposition,
        disposition_params=disposition_params,
        transfer_encoding=transfer_encoding,
        id=headers.get("Content-Id").strip(_ID_TRIM),
        charset=charset,
    )


def is_text(content_info: ContentInfo) -> bool:
    return content_info.type in TEXT_TYPES


def is_multipart(content_info: ContentInfo) -> bool:
    return content_info.type.startswith("multipart/")


def is_inline_file(content_info: ContentInfo) -> bool:
    """Non-text part without attachment disposition that is named or marked inline."""
    if content_info.disposition == "attachment":
        return False
    if content_info.type.startswith("text/") or is_multipart(content_info):
        return False
    return content_info.disposition == "inline" or bool(content_info.name)


def is_attached_file(content_info: ContentInfo) -> bool:
    """Attachment by disposition, or an undisposed part of a binary primary type."""
    if content_info.disposition == "attachment":
        return True
    return content_info.disposition == "" and content_info.primary_type in BINARY_PRIMARY_TYPES
