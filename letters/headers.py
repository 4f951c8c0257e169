# ============================================================================
# letters/headers.py - Header record extraction
# ============================================================================

import logging
from typing import Callable, List, Optional, TypeVar

from .decoders import decode_header
from .errors import HeaderDecodeError, HeaderFieldError
from .interfaces import AddressesFunc, AddressFunc, DateFunc
from .models import ContentInfo, Headers
from .options import parse_address, parse_address_list, parse_date
from .reader import HeaderMap

# Headers stored in their own Headers field (or consumed by ContentInfo)
# rather than in Headers.extra_headers.
EXPLICIT_HEADERS = frozenset([
    "Date",
    "Sender",
    "From",
    "Reply-To",
    "To",
    "Cc",
    "Bcc",
    "Message-Id",
    "In-Reply-To",
    "References",
    "Received",
    "Subject",
    "Comments",
    "Keywords",
    "Resent-Date",
    "Resent-From",
    "Resent-Sender",
    "Resent-To",
    "Resent-Cc",
    "Resent-Bcc",
    "Resent-Message-Id",
    "Content-Transfer-Encoding",
    "Content-Type",
    "Content-Disposition",
])

_ID_TRIM = "<> \n"

T = TypeVar("T")


def _message_id(value: str) -> str:
    return value.strip(_ID_TRIM)


def _message_ids(value: str) -> List[str]:
    ids = []
    for token in value.split():
        token = token.strip(_ID_TRIM).strip()
        if token:
            ids.append(token)
    return ids


def _comma_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class HeaderExtractor:
    """Builds the Headers record of a message from its raw header fields."""

    def __init__(
        self,
        logger: logging.Logger,
        address_func: Optional[AddressFunc] = None,
        addresses_func: Optional[AddressesFunc] = None,
        date_func: Optional[DateFunc] = None,
    ):
        self.logger = logger
        self.address_func = address_func or parse_address
        self.addresses_func = addresses_func or parse_address_list
        self.date_func = date_func or parse_date

    def extract(self, raw_headers: HeaderMap, content_info: Optional[ContentInfo] = None) -> Headers:
        """
        Extract the explicit header fields and collect the rest.

        Empty address and date headers are left absent. Failures of the
        address and date functions are raised as HeaderFieldError naming the
        header; undecodable encoded words raise HeaderDecodeError.
        """
        headers = Headers(content_info=content_info)

        for name, values in raw_headers.items():
            if name in EXPLICIT_HEADERS:
                continue
            headers.extra_headers[name] = [self._decode(name, value) for value in values]

        headers.sender = self._address(raw_headers, "Sender", self.address_func)
        headers.from_ = self._address(raw_headers, "From", self.addresses_func)
        headers.reply_to = self._address(raw_headers, "Reply-To", self.addresses_func)
        headers.to = self._address(raw_headers, "To", self.addresses_func)
        headers.cc = self._address(raw_headers, "Cc", self.addresses_func)
        headers.bcc = self._address(raw_headers, "Bcc", self.addresses_func)
        headers.resent_from = self._address(raw_headers, "Resent-From", self.addresses_func)
        headers.resent_sender = self._address(raw_headers, "Resent-Sender", self.address_func)
        headers.resent_to = self._address(raw_headers, "Resent-To", self.addresses_func)
        headers.resent_cc = self._address(raw_headers, "Resent-Cc", self.addresses_func)
        headers.resent_bcc = self._address(raw_headers, "Resent-Bcc", self.addresses_func)

        headers.date = self._call(raw_headers, "Date", self.date_func)
        headers.resent_date = self._call(raw_headers, "Resent-Date", self.date_func)

        headers.subject = self._decode("Subject", raw_headers.get("Subject").strip())
        headers.comments = self._decode("Comments", raw_headers.get("Comments").strip())

        headers.received = raw_headers.get_all("Received")
        headers.message_id = _message_id(raw_headers.get("Message-Id"))
        headers.in_reply_to = _message_ids(raw_headers.get("In-Reply-To"))
        headers.references = _message_ids(raw_headers.get("References"))
        headers.keywords = _comma_list(raw_headers.get("Keywords"))
        headers.resent_message_id = _message_id(raw_headers.get("Resent-Message-Id"))

        self.logger.debug(f"Extracted headers: {len(headers.extra_headers)} extra header fields")
        return headers

    @staticmethod
    def _decode(name: str, value: str) -> str:
        try:
            return decode_header(value)
        except HeaderDecodeError as exc:
            exc.field = name
            raise

    def _address(self, raw_headers: HeaderMap, name: str, func: Callable[[str], T]) -> Optional[T]:
        value = raw_headers.get(name).strip()
        decoded = self._decode(name, value).strip() if value else ""
        if not decoded:
            return None
        return self._run(name, value, func, decoded)

    def _call(self, raw_headers: HeaderMap, name: str, func: Callable[[str], T]) -> Optional[T]:
        value = raw_headers.get(name).strip()
        if not value:
            return None
        return self._run(name, value, func, value)

    @staticmethod
    def _run(name: str, raw_value: str, func: Callable[[str], T], argument: str) -> T:
        try:
            return func(argument)
        except Exception as exc:
            raise HeaderFieldError(name, raw_value, str(exc)) from exc
