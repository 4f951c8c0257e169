# ============================================================================
# letters/parser.py - EmailParser facade and root dispatch
# ============================================================================

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Collection, Optional, Union

from .config import ProcessingMode, config
from .content_info import extract_content_info, is_multipart, is_text
from .errors import LettersError, MessageReadError, MissingBoundaryError
from .headers import HeaderExtractor
from .interfaces import AddressesFunc, AddressFunc, DateFunc, FileFunc
from .models import Email, FileType
from .reader import read_message
from .structure_extractor import EmailStructureExtractor, StagedEmail


class EmailParser:
    """
    High level API for parsing email messages.

    All settings are fixed when the parser is created, so one instance can
    parse any number of messages.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        *,
        processing_mode: Union[ProcessingMode, str] = ProcessingMode.FULL,
        skip_content_types: Collection[str] = (),
        address_func: Optional[AddressFunc] = None,
        addresses_func: Optional[AddressesFunc] = None,
        date_func: Optional[DateFunc] = None,
        file_func: Optional[FileFunc] = None,
        max_depth: Optional[int] = None,
        fallback_charset: Optional[str] = None,
    ) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.processing_mode = ProcessingMode(processing_mode)
        self.skip_content_types = frozenset(t.strip().lower() for t in skip_content_types)
        self.header_extractor = HeaderExtractor(
            self.logger,
            address_func=address_func,
            addresses_func=addresses_func,
            date_func=date_func,
        )
        self.structure_extractor = EmailStructureExtractor(
            self.logger,
            processing_mode=self.processing_mode,
            skip_content_types=self.skip_content_types,
            file_func=file_func,
            max_depth=max_depth if max_depth is not None else config.MAX_NESTING_DEPTH,
            fallback_charset=fallback_charset,
        )

    # ------------------------------------------------------------------
    def parse(self, source: Union[bytes, str, BinaryIO]) -> Email:
        """Parse a complete message; raises a LettersError subclass on failure."""
        try:
            return self._parse(source)
        except LettersError as exc:
            self.logger.error(f"Failed to parse message: {exc}")
            raise

    def parse_file(self, path: Union[str, Path]) -> Email:
        self.logger.info(f"Parsing {path}")
        try:
            with open(path, "rb") as fh:
                return self.parse(fh)
        except OSError as exc:
            raise MessageReadError(f"cannot read message: {exc}") from exc

    # ------------------------------------------------------------------
    def _parse(self, source: Union[bytes, str, BinaryIO]) -> Email:
        message = read_message(source)
        content_info = extract_content_info(message.headers)
        staged = StagedEmail()
        staged.email.headers = self.header_extractor.extract(message.headers, content_info)

        if self.processing_mode == ProcessingMode.HEADERS_ONLY:
            self.logger.debug("Headers only mode, body not processed")
            return staged.email

        ctype = content_info.type
        self.logger.info(f"Parsing {ctype} message in {self.processing_mode.value} mode")

        if ctype in self.skip_content_types:
            self.logger.debug(f"Message body of type {ctype} skipped")
        elif is_text(content_info):
            self.structure_extractor.parse_text(message.body, content_info, staged)
        elif is_multipart(content_info):
            if not content_info.boundary:
                raise MissingBoundaryError(ctype)
            self.structure_extractor.extract_parts(
                message.body, content_info, content_info.boundary, staged
            )
        elif self.processing_mode != ProcessingMode.FULL:
            self.logger.debug(f"Message body of type {ctype} skipped in "
                              f"{self.processing_mode.value} mode")
        else:
            file_type = FileType.INLINE if content_info.disposition == "inline" else FileType.ATTACHMENT
            self.structure_extractor.parse_file(message.body, content_info, file_type, staged)

        email = staged.email
        self.logger.info(f"Parsed message: {len(email.text)} chars of text, "
                         f"{len(email.html)} chars of html, {len(email.files)} files")
        return email
