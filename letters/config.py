"""
Centralized configuration management for the letters parser
All configurable values consolidated in one place for easy management
"""

import os
from enum import Enum
from typing import Any, Dict, List


class ProcessingMode(str, Enum):
    """How much of a message the parser processes."""

    FULL = "full"
    HEADERS_ONLY = "headers_only"
    NO_ATTACHMENTS = "no_attachments"


def _split_list(value: str) -> List[str]:
    return [item.strip().lower() for item in value.split(",") if item.strip()]


class ParserConfig:
    """Configuration for the letters parser with environment variable override support"""

    def __init__(self):
        # Processing
        self.PROCESSING_MODE = os.getenv('LETTERS_PROCESSING_MODE', ProcessingMode.FULL.value)
        self.SKIP_CONTENT_TYPES = _split_list(os.getenv('LETTERS_SKIP_CONTENT_TYPES', ''))
        self.MAX_NESTING_DEPTH = int(os.getenv('LETTERS_MAX_NESTING_DEPTH', 50))

        # Charset handling for parts without a declared charset
        self.FALLBACK_CHARSET = os.getenv('LETTERS_FALLBACK_CHARSET', 'cp1252')
        self.CHARSET_DETECTION_MIN_CONFIDENCE = float(
            os.getenv('LETTERS_CHARSET_DETECTION_MIN_CONFIDENCE', 0.5)
        )

        # Output
        self.FILE_PREVIEW_BYTES = int(os.getenv('LETTERS_FILE_PREVIEW_BYTES', 0))
        self.DEFAULT_LOG_LEVEL = os.getenv('LETTERS_DEFAULT_LOG_LEVEL', 'INFO')

        # Content types that are skipped with a diagnostic instead of failing
        self.IGNORED_CONTENT_TYPES = [
            "text/calendar",
            "text/vcard",
            "text/x-vcard",
        ]

        # Valid values
        self.VALID_PROCESSING_MODES = [mode.value for mode in ProcessingMode]
        self.VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty when valid)."""
        problems = []
        if self.PROCESSING_MODE not in self.VALID_PROCESSING_MODES:
            problems.append(
                f"LETTERS_PROCESSING_MODE must be one of {self.VALID_PROCESSING_MODES}, "
                f"got {self.PROCESSING_MODE!r}"
            )
        if self.MAX_NESTING_DEPTH < 1:
            problems.append("LETTERS_MAX_NESTING_DEPTH must be at least 1")
        if not 0.0 <= self.CHARSET_DETECTION_MIN_CONFIDENCE <= 1.0:
            problems.append("LETTERS_CHARSET_DETECTION_MIN_CONFIDENCE must be between 0 and 1")
        if self.FILE_PREVIEW_BYTES < 0:
            problems.append("LETTERS_FILE_PREVIEW_BYTES must not be negative")
        if self.DEFAULT_LOG_LEVEL.upper() not in self.VALID_LOG_LEVELS:
            problems.append(f"LETTERS_DEFAULT_LOG_LEVEL must be one of {self.VALID_LOG_LEVELS}")
        return problems

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary"""
        return {
            'processing_mode': self.PROCESSING_MODE,
            'skip_content_types': self.SKIP_CONTENT_TYPES,
            'max_nesting_depth': self.MAX_NESTING_DEPTH,
            'fallback_charset': self.FALLBACK_CHARSET,
            'charset_detection_min_confidence': self.CHARSET_DETECTION_MIN_CONFIDENCE,
            'file_preview_bytes': self.FILE_PREVIEW_BYTES,
            'default_log_level': self.DEFAULT_LOG_LEVEL,
            'ignored_content_types': self.IGNORED_CONTENT_TYPES,
            'valid_processing_modes': self.VALID_PROCESSING_MODES,
            'valid_log_levels': self.VALID_LOG_LEVELS,
        }

# Create a singleton instance
config = ParserConfig()
