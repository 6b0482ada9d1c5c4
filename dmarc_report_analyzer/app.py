import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import structlog
from dataclasses_serialization.serializer_base import DeserializationError

from dmarc_report_analyzer.config import AnalyzerConfig, analyzer_config_from_dict
from dmarc_report_analyzer.email_attachments import get_attachments, parse_email
from dmarc_report_analyzer.errors import ReportError
from dmarc_report_analyzer.logging import configure_logging
from dmarc_report_analyzer.pipeline import (
    ReportAnalysis,
    analyze_attachment,
    analyze_attachments,
)
from dmarc_report_analyzer.rendering import render_details, render_summary
from dmarc_report_analyzer.report import Attachment
from dmarc_report_analyzer.serialization import dumps, error_to_dict

logger = structlog.get_logger()

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_NO_REPORT = 3

EMAIL_CONTENT_TYPE = "message/rfc822"


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dmarc-report-analyzer",
        description="Analyze a DMARC aggregate report attachment (gzip, zip or "
        "XML) or an email containing one, and print the parsed report, "
        "summary statistics and a health rating.",
    )
    parser.add_argument(
        "path",
        help="Report attachment or .eml file, '-' to read from stdin",
    )
    parser.add_argument(
        "--configuration",
        type=argparse.FileType("r"),
        default=None,
        help="Configuration file",
    )
    parser.add_argument(
        "--filename",
        default=None,
        help="Filename hint for format detection (defaults to the path's name)",
    )
    parser.add_argument(
        "--content-type",
        default="",
        help="MIME content type hint for format detection",
    )
    parser.add_argument(
        "--format",
        choices=("json", "text"),
        default="json",
        help="Output format",
    )
    parser.add_argument(
        "--details",
        default=False,
        action="store_true",
        help="Include the per-record breakdown in text output",
    )
    parser.add_argument(
        "--debug",
        default=False,
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def read_input(path: str, filename: Optional[str], content_type: str) -> Attachment:
    if path == "-":
        content = sys.stdin.buffer.read()
        default_filename = ""
    else:
        content = Path(path).read_bytes()
        default_filename = Path(path).name
    return Attachment(
        filename=default_filename if filename is None else filename,
        content_type=content_type,
        content=content,
    )


def is_email(attachment: Attachment) -> bool:
    return (
        attachment.filename.lower().endswith(".eml")
        or attachment.content_type.lower() == EMAIL_CONTENT_TYPE
    )


def run(attachment: Attachment, config: AnalyzerConfig) -> Optional[ReportAnalysis]:
    if is_email(attachment):
        candidates = get_attachments(parse_email(attachment.content))
        logger.debug(
            "email_attachments_found",
            filenames=[candidate.filename for candidate in candidates],
        )
        return analyze_attachments(candidates, config)
    return analyze_attachment(attachment, config)


def render(result: ReportAnalysis, output_format: str, details: bool) -> str:
    if output_format == "text":
        text = render_summary(result)
        if details:
            text += "\n\n" + render_details(result)
        return text
    return dumps(result)


def main(argv: Sequence[str]) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    configuration: Dict[str, Any] = {}
    if args.configuration:
        configuration = json.load(args.configuration)
        args.configuration.close()

    configure_logging(configuration.get("logging", {}), debug=args.debug)

    try:
        config = analyzer_config_from_dict(configuration)
    except DeserializationError as err:
        parser.error(f"invalid analysis configuration: {err}")

    try:
        attachment = read_input(args.path, args.filename, args.content_type)
    except OSError as err:
        parser.error(f"cannot read {args.path}: {err}")
    logger.debug(
        "analyzing",
        filename=attachment.filename,
        content_type=attachment.content_type,
        size=len(attachment.content),
    )

    try:
        result = run(attachment, config)
    except ReportError as err:
        logger.warning(str(err), exc_info=err, filename=attachment.filename)
        print(dumps(error_to_dict(err)))
        return EXIT_FAILURE

    if result is None:
        logger.info("no_report_found", filename=attachment.filename)
        print(
            dumps(
                {
                    "error": "NoReportFound",
                    "message": "No DMARC aggregate report attachment found.",
                }
            )
        )
        return EXIT_NO_REPORT

    logger.debug(
        "report_analyzed",
        domain=result.report.domain,
        rating=result.analysis.rating.value,
    )
    print(render(result, args.format, args.details))
    return EXIT_SUCCESS


def cli():
    sys.exit(main(sys.argv[1:]))
