import re
from enum import Enum
from typing import Mapping, Optional

import structlog

logger = structlog.get_logger()

_filename_regex = re.compile(r"""filename=["']?(?P<filename>[^\s"']+)["']?""")


class ReportFormat(Enum):
    ZIP = "zip"
    GZIP = "gzip"
    XML = "xml"

    @classmethod
    def from_mimetype(cls, mimetype: str) -> Optional["ReportFormat"]:
        return mimetype_formats.get(mimetype.strip().lower())

    @classmethod
    def from_extension(cls, extension: str) -> Optional["ReportFormat"]:
        return extension_formats.get(extension)


mimetype_formats: Mapping[str, ReportFormat] = {
    "application/zip": ReportFormat.ZIP,
    "application/x-zip-compressed": ReportFormat.ZIP,
    "application/gzip": ReportFormat.GZIP,
    "application/x-gzip": ReportFormat.GZIP,
    "application/xml": ReportFormat.XML,
    "text/xml": ReportFormat.XML,
}

# Case-sensitive on purpose, "report.XML" is not recognized.
extension_formats: Mapping[str, ReportFormat] = {
    "zip": ReportFormat.ZIP,
    "gz": ReportFormat.GZIP,
    "xml": ReportFormat.XML,
}


def filename_from_disposition(disposition: Optional[str]) -> Optional[str]:
    """Extract the ``filename`` parameter of a Content-Disposition value.

    The value may be double quoted, single quoted or unquoted. Only the first
    whitespace-free token is returned.
    """
    if not disposition:
        return None
    match = _filename_regex.search(str(disposition))
    if match is None:
        return None
    return match.group("filename")


def guess_format_from_filename(disposition: Optional[str]) -> Optional[ReportFormat]:
    filename = filename_from_disposition(disposition)
    if filename is None:
        return None
    extension = filename.rsplit(".", 1)[-1]
    return ReportFormat.from_extension(extension)


def determine_format(
    mimetype: str, disposition: Optional[str] = None
) -> Optional[ReportFormat]:
    """Decide which container format an email part holds, if any.

    The declared MIME type takes precedence. Only if it is not one of the
    known report types, the file extension from the Content-Disposition
    header is consulted. ``None`` means the part is not a report candidate.
    """
    report_format = ReportFormat.from_mimetype(mimetype)
    if report_format is not None:
        return report_format

    report_format = guess_format_from_filename(disposition)
    if report_format is not None:
        logger.debug(
            "Guessed report format from filename.",
            mimetype=mimetype,
            disposition=str(disposition),
            report_format=report_format.name,
        )
    return report_format
