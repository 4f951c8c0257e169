# ============================================================================
# letters/cli.py - CLI
# ============================================================================

import argparse
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import create_email_parser
from .config import ProcessingMode, config
from .errors import ConfigurationError, ErrorHandler, LettersError
from .options import save_files_to_directory


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="letters",
        description="Decompose a MIME email into headers, text, html and files",
    )
    parser.add_argument("file", type=Path, help="Input email file (.eml)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--headers-only", action="store_true",
                      help="Only parse the headers, never the body")
    mode.add_argument("--no-attachments", action="store_true",
                      help="Parse text parts but skip inline and attached files")
    parser.add_argument("--skip-content-type", action="append", default=None, metavar="TYPE",
                        help="Content type to skip entirely (may be repeated)")
    parser.add_argument("--save-files", type=Path, metavar="DIR",
                        help="Write inline and attached files to this directory")
    parser.add_argument("--include-data", action="store_true",
                        help="Include base64 file data in the JSON output")
    parser.add_argument("--max-depth", type=int, default=None,
                        help="Maximum multipart nesting depth")
    parser.add_argument("--log-level", type=str, default=config.DEFAULT_LOG_LEVEL.upper(),
                        choices=config.VALID_LOG_LEVELS,
                        help="Set logging level")
    parser.add_argument("--output", type=Path, help="Output JSON file")
    return parser


def _write_result(result: Dict[str, Any], output: Optional[Path]) -> None:
    if output:
        with open(output, 'w', encoding='utf-8') as f:
            json.dump(result, f, indent=2, default=str)
        print(f"Results saved to: {output}")
    else:
        print(json.dumps(result, indent=2, default=str))


def main(argv: Optional[List[str]] = None) -> int:
    """Command line interface for the letters parser."""
    args = _build_arg_parser().parse_args(argv)

    problems = config.validate()
    if problems:
        error = ConfigurationError("invalid configuration: " + "; ".join(problems))
        _write_result(ErrorHandler.build_error_response(error, str(args.file)), args.output)
        return 1

    if args.headers_only:
        processing_mode = ProcessingMode.HEADERS_ONLY
    elif args.no_attachments:
        processing_mode = ProcessingMode.NO_ATTACHMENTS
    else:
        processing_mode = None

    email_parser = create_email_parser(
        log_level=getattr(logging, args.log_level.upper()),
        processing_mode=processing_mode,
        skip_content_types=args.skip_content_type,
        file_func=save_files_to_directory(args.save_files) if args.save_files else None,
        max_depth=args.max_depth,
    )

    try:
        email = email_parser.parse_file(args.file)
        result = {
            "success": True,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "source": str(args.file),
            "processing_mode": email_parser.processing_mode.value,
            "email": email.to_dict(include_data=args.include_data,
                                   preview_bytes=config.FILE_PREVIEW_BYTES),
        }
        exit_code = 0
    except LettersError as e:
        result = ErrorHandler.build_error_response(e, str(args.file))
        exit_code = 1

    _write_result(result, args.output)
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    import sys
    sys.exit(main())
