# ============================================================================
# letters/__init__.py - Factory and DI setup
# ============================================================================

import logging
import sys
from typing import Collection, Optional, Union

from .config import ProcessingMode, config
from .errors import ErrorHandler, LettersError
from .interfaces import AddressesFunc, AddressFunc, DateFunc, FileFunc
from .models import Address, ContentInfo, Email, File, FileType, Headers
from .options import (
    buffer_file,
    parse_address,
    parse_address_list,
    parse_date,
    save_files_to_directory,
)
from .parser import EmailParser

__all__ = [
    "Address",
    "ContentInfo",
    "Email",
    "EmailParser",
    "ErrorHandler",
    "File",
    "FileType",
    "Headers",
    "LettersError",
    "ProcessingMode",
    "buffer_file",
    "create_email_parser",
    "parse_address",
    "parse_address_list",
    "parse_date",
    "save_files_to_directory",
]


def create_email_parser(
    log_level: int = logging.INFO,
    processing_mode: Union[ProcessingMode, str, None] = None,
    skip_content_types: Optional[Collection[str]] = None,
    address_func: Optional[AddressFunc] = None,
    addresses_func: Optional[AddressesFunc] = None,
    date_func: Optional[DateFunc] = None,
    file_func: Optional[FileFunc] = None,
    max_depth: Optional[int] = None,
) -> EmailParser:
    """Factory function to create a configured EmailParser; unset options come from config."""
    # Setup logging; stdout is reserved for the CLI's JSON output
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    logger = logging.getLogger(__name__)

    return EmailParser(
        logger,
        processing_mode=processing_mode or config.PROCESSING_MODE,
        skip_content_types=(
            skip_content_types if skip_content_types is not None else config.SKIP_CONTENT_TYPES
        ),
        address_func=address_func,
        addresses_func=addresses_func,
        date_func=date_func,
        file_func=file_func,
        max_depth=max_depth if max_depth is not None else config.MAX_NESTING_DEPTH,
        fallback_charset=config.FALLBACK_CHARSET,
    )
