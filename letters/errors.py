# ============================================================================
# letters/errors.py - Parse errors and structured error responses
# ============================================================================

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class LettersError(Exception):
    """Base class for every error raised while parsing a message."""

    code = "PARSING_ERROR"

    def __init__(self, message: str, *, part: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.part = part
        self.field = field

    def __str__(self) -> str:
        context = []
        if self.part:
            context.append(f"part {self.part}")
        if self.field:
            context.append(f"{self.field} header")
        if context:
            return f"{', '.join(context)}: {self.message}"
        return self.message


class MessageReadError(LettersError):
    code = "READ_ERROR"


class FramingError(LettersError):
    code = "FRAMING_ERROR"


class MissingBoundaryError(FramingError):
    def __init__(self, content_type: str, **kwargs):
        super().__init__(f"{content_type} has no boundary parameter", **kwargs)
        self.content_type = content_type


class TruncatedMultipartError(FramingError):
    pass


class NestingDepthError(FramingError):
    code = "NESTING_TOO_DEEP"

    def __init__(self, max_depth: int, **kwargs):
        super().__init__(f"multipart nesting exceeds maximum depth of {max_depth}", **kwargs)
        self.max_depth = max_depth


class UnknownContentTypeError(LettersError):
    code = "UNKNOWN_CONTENT_TYPE"

    def __init__(self, content_type: str, **kwargs):
        super().__init__(f"unknown Content-Type {content_type!r}", **kwargs)
        self.content_type = content_type


class DecodeError(LettersError):
    code = "DECODE_ERROR"


class TransferDecodeError(DecodeError):
    pass


class UnknownCharsetError(DecodeError):
    def __init__(self, charset: str, **kwargs):
        super().__init__(f"encoding lookup failed for charset {charset!r}", **kwargs)
        self.charset = charset


class HeaderDecodeError(DecodeError):
    def __init__(self, value: str, reason: str, **kwargs):
        super().__init__(f"cannot decode MIME-word-encoded header {value!r}: {reason}", **kwargs)
        self.value = value


class HeaderFieldError(LettersError):
    code = "HEADER_ERROR"

    def __init__(self, field: str, value: str, reason: str):
        super().__init__(f"({value}) {reason}", field=field)
        self.value = value


class FileHandlerError(LettersError):
    code = "FILE_HANDLER_ERROR"


class ConfigurationError(LettersError):
    code = "CONFIGURATION_ERROR"


class ErrorHandler:
    """Builds the structured error documents reported by the CLI."""

    @staticmethod
    def build_error_response(error: Exception, source: str = "") -> Dict[str, Any]:
        if isinstance(error, LettersError):
            code = error.code
            message = ErrorHandler._MESSAGES.get(code, "Failed to parse email content")
            log_level = logging.WARNING if code == "READ_ERROR" else logging.ERROR
        else:
            code = "INTERNAL_ERROR"
            message = "An unexpected error occurred during processing"
            log_level = logging.ERROR

        details = str(error)
        log_message = f"Parsing {source or '<input>'} failed [{code}]: {message} - {details}"
        logging.getLogger(__name__).log(log_level, log_message)

        response: Dict[str, Any] = {
            "success": False,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "source": source,
            "error": {
                "code": code,
                "message": message,
                "details": details,
            },
            "troubleshooting": ErrorHandler._get_troubleshooting_info(code),
        }
        if isinstance(error, LettersError):
            if error.part:
                response["error"]["part"] = error.part
            if error.field:
                response["error"]["field"] = error.field
        return response

    _MESSAGES = {
        "READ_ERROR": "Input could not be read as an email message",
        "FRAMING_ERROR": "MIME multipart framing is broken",
        "NESTING_TOO_DEEP": "MIME parts are nested too deeply",
        "UNKNOWN_CONTENT_TYPE": "Message contains a part with an unhandled content type",
        "DECODE_ERROR": "Part or header content could not be decoded",
        "HEADER_ERROR": "A message header could not be parsed",
        "FILE_HANDLER_ERROR": "The file handler failed on an attachment",
        "CONFIGURATION_ERROR": "Parser configuration is invalid",
        "PARSING_ERROR": "Failed to parse email content",
    }

    @staticmethod
    def _get_troubleshooting_info(error_code: str) -> Dict[str, Any]:
        """Get troubleshooting information for specific error codes."""
        troubleshooting_guide = {
            "READ_ERROR": {
                "common_causes": [
                    "Empty input file",
                    "Input is not an RFC 5322 message (e.g. an Outlook .msg file)",
                ],
                "solutions": [
                    "Verify the file is a raw .eml message",
                    "Export the message in MIME format from the mail client",
                ],
            },
            "FRAMING_ERROR": {
                "common_causes": [
                    "Multipart message missing its boundary parameter",
                    "Message truncated before the closing boundary",
                ],
                "solutions": [
                    "Check the message was downloaded completely",
                    "Skip the offending content type with --skip-content-type",
                ],
            },
            "NESTING_TOO_DEEP": {
                "common_causes": ["Adversarial or corrupt message with deeply nested multiparts"],
                "solutions": ["Raise LETTERS_MAX_NESTING_DEPTH if the message is legitimate"],
            },
            "UNKNOWN_CONTENT_TYPE": {
                "common_causes": ["A part uses a content type the parser does not handle"],
                "solutions": ["Skip the content type with --skip-content-type"],
            },
            "DECODE_ERROR": {
                "common_causes": [
                    "Invalid base64 or quoted-printable data",
                    "Unknown charset label",
                    "Malformed RFC 2047 encoded word in a header",
                ],
                "solutions": [
                    "Verify the message is not corrupted",
                    "Register the charset alias with letters.decoders.charsets.register",
                ],
            },
            "HEADER_ERROR": {
                "common_causes": ["Malformed address list or date header"],
                "solutions": ["Supply a more lenient address_func, addresses_func or date_func"],
            },
            "FILE_HANDLER_ERROR": {
                "common_causes": ["The output directory is missing or not writable"],
                "solutions": ["Check the --save-files directory and its permissions"],
            },
            "CONFIGURATION_ERROR": {
                "common_causes": ["A LETTERS_* environment variable has an invalid value"],
                "solutions": ["Fix or unset the LETTERS_* variables named in the details"],
            },
            "INTERNAL_ERROR": {
                "common_causes": [
                    "Unexpected system error",
                    "Code bug or edge case",
                ],
                "solutions": [
                    "Re-run with --log-level DEBUG",
                    "Report the issue with the offending message",
                ],
            },
        }

        return troubleshooting_guide.get(error_code, {
            "common_causes": ["Unknown error"],
            "solutions": ["Re-run with --log-level DEBUG"],
        })
