# ============================================================================
# letters/models.py - Parsed email data model
# ============================================================================

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, BinaryIO, Dict, List, Optional


@dataclass
class ContentInfo:
    """Framing metadata of one MIME part (or of the message root)."""

    type: str = "text/plain"
    type_params: Dict[str, str] = field(default_factory=dict)
    disposition: str = ""
    disposition_params: Dict[str, str] = field(default_factory=dict)
    transfer_encoding: str = ""
    id: str = ""
    charset: str = ""

    @property
    def boundary(self) -> str:
        return self.type_params.get("boundary", "")

    @property
    def name(self) -> str:
        """Raw file name: disposition filename, falling back to the type name."""
        return self.disposition_params.get("filename") or self.type_params.get("name", "")

    @property
    def primary_type(self) -> str:
        return self.type.split("/", 1)[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "type_params": dict(self.type_params),
            "disposition": self.disposition,
            "disposition_params": dict(self.disposition_params),
            "transfer_encoding": self.transfer_encoding,
            "id": self.id,
            "charset": self.charset,
        }


@dataclass
class Address:
    name: str = ""
    address: str = ""

    def __str__(self) -> str:
        if self.name:
            return f"{self.name} <{self.address}>"
        return self.address


class FileType(str, Enum):
    INLINE = "inline"
    ATTACHMENT = "attachment"


@dataclass
class File:
    """
    An inline or attached file found in the message.

    - The file handler receives the file with `reader` positioned at the
      transfer-decoded payload; the default handler buffers it into `data`.
    - `reader` is cleared once the handler returns.
    """
    file_type: FileType
    name: str = ""
    content_info: ContentInfo = field(default_factory=ContentInfo)
    data: Optional[bytes] = None
    reader: Optional[BinaryIO] = field(default=None, repr=False, compare=False)

    @property
    def size(self) -> Optional[int]:
        return len(self.data) if self.data is not None else None

    def to_dict(self, include_data: bool = False, preview_bytes: int = 0) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "file_type": self.file_type.value,
            "name": self.name,
            "content_info": self.content_info.to_dict(),
            "size": self.size,
        }
        if self.data is not None:
            if include_data:
                result["data"] = base64.b64encode(self.data).decode("ascii")
            elif preview_bytes:
                result["data_preview"] = base64.b64encode(self.data[:preview_bytes]).decode("ascii")
        return result


def _addresses_to_list(addresses: Optional[List[Address]]) -> Optional[List[str]]:
    if addresses is None:
        return None
    return [str(a) for a in addresses]


def _date_to_str(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class Headers:
    """Header record: explicit RFC 5322 fields plus everything else in extra_headers."""

    date: Optional[datetime] = None
    sender: Optional[Address] = None
    from_: Optional[List[Address]] = None
    reply_to: Optional[List[Address]] = None
    to: Optional[List[Address]] = None
    cc: Optional[List[Address]] = None
    bcc: Optional[List[Address]] = None
    message_id: str = ""
    in_reply_to: List[str] = field(default_factory=list)
    references: List[str] = field(default_factory=list)
    subject: str = ""
    comments: str = ""
    keywords: List[str] = field(default_factory=list)
    received: List[str] = field(default_factory=list)
    resent_date: Optional[datetime] = None
    resent_from: Optional[List[Address]] = None
    resent_sender: Optional[Address] = None
    resent_to: Optional[List[Address]] = None
    resent_cc: Optional[List[Address]] = None
    resent_bcc: Optional[List[Address]] = None
    resent_message_id: str = ""
    extra_headers: Dict[str, List[str]] = field(default_factory=dict)
    content_info: Optional[ContentInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": _date_to_str(self.date),
            "sender": str(self.sender) if self.sender else None,
            "from": _addresses_to_list(self.from_),
            "reply_to": _addresses_to_list(self.reply_to),
            "to": _addresses_to_list(self.to),
            "cc": _addresses_to_list(self.cc),
            "bcc": _addresses_to_list(self.bcc),
            "message_id": self.message_id,
            "in_reply_to": list(self.in_reply_to),
            "references": list(self.references),
            "subject": self.subject,
            "comments": self.comments,
            "keywords": list(self.keywords),
            "received": list(self.received),
            "resent_date": _date_to_str(self.resent_date),
            "resent_from": _addresses_to_list(self.resent_from),
            "resent_sender": str(self.resent_sender) if self.resent_sender else None,
            "resent_to": _addresses_to_list(self.resent_to),
            "resent_cc": _addresses_to_list(self.resent_cc),
            "resent_bcc": _addresses_to_list(self.resent_bcc),
            "resent_message_id": self.resent_message_id,
            "extra_headers": {k: list(v) for k, v in self.extra_headers.items()},
            "content_info": self.content_info.to_dict() if self.content_info else None,
        }


@dataclass
class Email:
    """The parsed message returned by EmailParser.parse."""

    headers: Headers = field(default_factory=Headers)
    text: str = ""
    enriched_text: str = ""
    html: str = ""
    files: List[File] = field(default_factory=list)

    def to_dict(self, include_data: bool = False, preview_bytes: int = 0) -> Dict[str, Any]:
        return {
            "headers": self.headers.to_dict(),
            "text": self.text,
            "enriched_text": self.enriched_text,
            "html": self.html,
            "file_count": len(self.files),
            "files": [f.to_dict(include_data, preview_bytes) for f in self.files],
        }
