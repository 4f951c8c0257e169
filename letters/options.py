# ============================================================================
# letters/options.py - Default address, date and file functions
# ============================================================================

import itertools
import logging
import os
import re
import shutil
from datetime import datetime
from email.utils import getaddresses, parsedate_to_datetime
from pathlib import Path
from typing import List, Union

from .interfaces import FileFunc
from .models import Address, File

logger = logging.getLogger(__name__)

_ADDR_SPEC = re.compile(r"^[^@\s]+@[^@\s]+$")
_UNSAFE_FILENAME_CHARS = re.compile(r"[\x00-\x1f/\\:*?\"<>|]+")


def parse_address_list(value: str) -> List[Address]:
    """Default list parser; raises ValueError on anything that is not an address."""
    addresses: List[Address] = []
    for name, addr in getaddresses([value]):
        if not name and not addr:
            continue
        addr = addr.strip()
        if not _ADDR_SPEC.match(addr):
            raise ValueError(f"mail: invalid address {addr or name!r} in {value!r}")
        addresses.append(Address(name=name.strip(), address=addr))
    # "undisclosed-recipients:;" is a valid empty group
    if not addresses and not (":" in value and value.rstrip().endswith(";")):
        raise ValueError(f"mail: no address in {value!r}")
    return addresses


def parse_address(value: str) -> Address:
    """Default single address parser."""
    addresses = parse_address_list(value)
    if len(addresses) != 1:
        raise ValueError(f"mail: expected single address, got {len(addresses)} in {value!r}")
    return addresses[0]


def parse_date(value: str) -> datetime:
    """Default date parser for RFC 5322 dates."""
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"mail: header could not be parsed as a date: {value!r}") from exc


def buffer_file(file: File) -> None:
    """Default file function: read the whole payload into file.data."""
    file.data = file.reader.read()


def _safe_filename(name: str) -> str:
    name = os.path.basename(name.replace("\\", "/"))
    name = _UNSAFE_FILENAME_CHARS.sub("_", name).strip(" .")
    return name


def _unique_path(path: Path) -> Path:
    if not path.exists():
        return path
    for n in itertools.count(1):
        candidate = path.with_name(f"{path.stem}-{n}{path.suffix}")
        if not candidate.exists():
            return candidate


def save_files_to_directory(directory: Union[str, Path]) -> FileFunc:
    """
    Return a file function that streams each file into directory instead of
    buffering it. Names are sanitised; clashing names get a numeric suffix and
    unnamed files are called "<file type>-<n>".
    """
    directory = Path(directory)
    unnamed = itertools.count(1)

    def save(file: File) -> None:
        directory.mkdir(parents=True, exist_ok=True)
        name = _safe_filename(file.name) or f"{file.file_type.value}-{next(unnamed)}"
        target = _unique_path(directory / name)
        with open(target, "wb") as fh:
            shutil.copyfileobj(file.reader, fh)
        logger.info(f"Saved {file.file_type.value} file {file.name!r} to {target}")

    return save
