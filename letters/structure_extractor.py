# ============================================================================
# letters/structure_extractor.py - Recursive multipart traversal
# ============================================================================

import io
import logging
from dataclasses import dataclass, field
from typing import Collection, Optional

from .classifier import PartAction, classify
from .config import ProcessingMode, config
from .content_info import extract_content_info
from .decoders import decode_file, decode_header, decode_text
from .errors import FileHandlerError, LettersError, NestingDepthError
from .interfaces import FileFunc
from .models import ContentInfo, Email, File, FileType
from .options import buffer_file
from .reader import MultipartReader, RawMessage


@dataclass
class StagedEmail:
    """The Email under construction, shared by every level of one traversal."""

    email: Email = field(default_factory=Email)

    def add_text(self, content_type: str, text: str) -> None:
        if content_type == "text/plain":
            if self.email.text:
                self.email.text += "\n\n"
            self.email.text += text
        elif content_type == "text/enriched":
            self.email.enriched_text += text
        elif content_type == "text/html":
            self.email.html += text

    def add_file(self, file: File) -> None:
        self.email.files.append(file)


class EmailStructureExtractor:
    """Walks multipart bodies and feeds decoded text and files into a StagedEmail."""

    def __init__(
        self,
        logger: logging.Logger,
        processing_mode: ProcessingMode = ProcessingMode.FULL,
        skip_content_types: Collection[str] = (),
        file_func: Optional[FileFunc] = None,
        max_depth: Optional[int] = None,
        fallback_charset: Optional[str] = None,
        min_confidence: Optional[float] = None,
    ):
        self.logger = logger
        self.processing_mode = processing_mode
        self.skip_content_types = frozenset(skip_content_types)
        self.file_func = file_func or buffer_file
        self.max_depth = max_depth if max_depth is not None else config.MAX_NESTING_DEPTH
        self.fallback_charset = fallback_charset
        self.min_confidence = min_confidence

    def extract_parts(
        self,
        body: bytes,
        parent_ci: ContentInfo,
        boundary: str,
        staged: StagedEmail,
        depth: int = 1,
        path: str = "",
    ) -> None:
        """
        Process every part of a multipart body in order, recursing into
        nested multiparts. The first error aborts the whole traversal.
        """
        if depth > self.max_depth:
            raise NestingDepthError(self.max_depth, part=path or None)

        self.logger.debug(f"Extracting {parent_ci.type} parts at depth {depth}")
        count = 0
        for index, part in enumerate(MultipartReader(body, boundary), start=1):
            part_path = f"{path}.{index}" if path else str(index)
            count += 1
            try:
                self._process_part(part, parent_ci, staged, depth, part_path)
            except LettersError as exc:
                if exc.part is None:
                    exc.part = part_path
                raise
        self.logger.debug(f"Finished {count} parts of {parent_ci.type} at depth {depth}")

    def _process_part(
        self,
        part: RawMessage,
        parent_ci: ContentInfo,
        staged: StagedEmail,
        depth: int,
        path: str,
    ) -> None:
        content_info = extract_content_info(part.headers, parent_ci)
        decision = classify(content_info, self.processing_mode, self.skip_content_types)
        self.logger.debug(f"Part {path} ({content_info.type}): {decision.action.value}")

        if decision.action == PartAction.SKIP:
            if decision.diagnostic:
                self.logger.info(f"Part {path}: {decision.reason}")
            else:
                self.logger.debug(f"Part {path} skipped: {decision.reason}")
        elif decision.action == PartAction.ERROR:
            raise decision.error
        elif decision.action == PartAction.RECURSE:
            self.extract_parts(part.body, content_info, content_info.boundary, staged, depth + 1, path)
        elif decision.action == PartAction.TEXT:
            self.parse_text(part.body, content_info, staged)
        elif decision.action == PartAction.INLINE_FILE:
            self.parse_file(part.body, content_info, FileType.INLINE, staged, path)
        elif decision.action == PartAction.ATTACHMENT_FILE:
            self.parse_file(part.body, content_info, FileType.ATTACHMENT, staged, path)

    def parse_text(self, raw: bytes, content_info: ContentInfo, staged: StagedEmail) -> None:
        text = decode_text(
            raw,
            content_info,
            fallback_charset=self.fallback_charset,
            min_confidence=self.min_confidence,
        )
        staged.add_text(content_info.type, text)

    def parse_file(
        self,
        raw: bytes,
        content_info: ContentInfo,
        file_type: FileType,
        staged: StagedEmail,
        path: str = "",
    ) -> None:
        """Decode a file part and hand it to the file function."""
        name = decode_header(content_info.name)
        file = File(
            file_type=file_type,
            name=name,
            content_info=content_info,
            reader=io.BytesIO(decode_file(raw, content_info)),
        )
        try:
            self.file_func(file)
        except Exception as exc:
            raise FileHandlerError(f"file handler failed on {name or content_info.type!r}: {exc}",
                                   part=path or None) from exc
        finally:
            file.reader = None

        self.logger.info(f"Processed {file_type.value} file {name!r} ({content_info.type})")
        staged.add_file(file)
