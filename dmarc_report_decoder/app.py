import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import structlog

from dmarc_report_decoder.deserialization import ReportParseError, parse_report_message
from dmarc_report_decoder.logging import configure_logging
from dmarc_report_decoder.model import Feedback

logger = structlog.get_logger()

STDIN = "-"


def main(argv: Sequence[str]) -> int:
    parser = argparse.ArgumentParser(
        description="Extract DMARC aggregate reports from email messages and "
        "print them as JSON."
    )
    parser.add_argument(
        "--configuration",
        type=argparse.FileType("r"),
        default=None,
        help="Configuration file",
    )
    parser.add_argument(
        "--debug",
        default=False,
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "messages",
        nargs="+",
        help=f"Email message files (RFC 5322), '{STDIN}' to read from stdin",
    )
    args = parser.parse_args(argv)

    configuration: Dict[str, Any] = {}
    if args.configuration:
        configuration = json.load(args.configuration)
        args.configuration.close()

    configure_logging(configuration.get("logging", {}), debug=args.debug)

    reports: List[Feedback] = []
    failed = False
    for source in args.messages:
        report = decode_message_file(source)
        if report is None:
            failed = True
        else:
            reports.append(report)

    documents = [report.model_dump(mode="json") for report in reports]
    indent = configuration.get("indent", 2)
    if len(args.messages) == 1:
        if documents:
            print(json.dumps(documents[0], indent=indent))
    else:
        print(json.dumps(documents, indent=indent))

    return 1 if failed else 0


def decode_message_file(source: str) -> Optional[Feedback]:
    log = logger.bind(source=source)
    try:
        if source == STDIN:
            raw_message = sys.stdin.buffer.read()
        else:
            raw_message = Path(source).read_bytes()
    except OSError as err:
        log.warning("Failed to read email message.", exc_info=err)
        return None

    try:
        report = parse_report_message(raw_message)
    except ReportParseError as err:
        log.warning(str(err), exc_info=err)
        return None

    log.info(
        "Decoded aggregate report.",
        org_name=report.report_metadata.org_name,
        report_id=report.report_metadata.report_id,
    )
    return report


def run():
    sys.exit(main(sys.argv[1:]))
