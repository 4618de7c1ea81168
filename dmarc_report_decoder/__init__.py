from dmarc_report_decoder.deserialization import (
    ReportParseError,
    get_aggregate_report_from_email,
    parse_report_message,
)
from dmarc_report_decoder.model import Feedback

__version__ = "1.0.0"

__all__ = [
    "Feedback",
    "ReportParseError",
    "get_aggregate_report_from_email",
    "parse_report_message",
]
