import email
import email.policy
import gzip
import io
import zlib
from dataclasses import dataclass
from email.errors import MessageError
from email.message import EmailMessage
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union, cast
from xml.parsers.expat import ExpatError
from zipfile import BadZipFile, ZipFile

import structlog
import xmltodict
from pydantic import ValidationError

from dmarc_report_decoder.model.dmarc_aggregate_report import (
    REPEATED_ELEMENTS,
    Feedback,
)
from dmarc_report_decoder.report_format import (
    ReportFormat,
    determine_format,
    filename_from_disposition,
)

logger = structlog.get_logger()


class ReportParseError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


@dataclass(frozen=True)
class ReportAttachment:
    part: EmailMessage
    format: ReportFormat

    @property
    def content_type(self) -> str:
        return self.part.get_content_type()

    @property
    def filename(self) -> Optional[str]:
        return filename_from_disposition(self.part.get("Content-Disposition"))

    @property
    def payload(self) -> bytes:
        return cast(Optional[bytes], self.part.get_payload(decode=True)) or b""


def candidate_parts(msg: EmailMessage) -> List[EmailMessage]:
    subparts = list(msg.iter_parts())
    if not subparts:
        return [msg]
    return subparts


def locate_report_attachment(msg: EmailMessage) -> ReportAttachment:
    for part in candidate_parts(msg):
        report_format = determine_format(
            part.get_content_type(), part.get("Content-Disposition")
        )
        if report_format is not None:
            return ReportAttachment(part, report_format)
    raise ReportParseError("No suitable attachment found.")


def decode_zip(zip_bytes: bytes) -> str:
    # Only the first archive member is read, any others are ignored.
    try:
        with ZipFile(io.BytesIO(zip_bytes), "r") as zip_file:
            members = zip_file.infolist()
            if not members:
                raise ReportParseError("Failed to read zip archive: archive is empty.")
            with zip_file.open(members[0], "r") as f:
                return f.read().decode("utf-8")
    except (
        BadZipFile,
        EOFError,
        NotImplementedError,
        OSError,
        RuntimeError,
        UnicodeDecodeError,
        zlib.error,
    ) as err:
        raise ReportParseError(f"Failed to read zip archive: {err}") from err


def decode_gzip(gzip_bytes: bytes) -> str:
    try:
        return gzip.decompress(gzip_bytes).decode("utf-8")
    except (EOFError, OSError, UnicodeDecodeError, zlib.error) as err:
        raise ReportParseError(f"Failed to read gzip stream: {err}") from err


def decode_xml(content: bytes) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as err:
        raise ReportParseError("Invalid UTF-8 document.") from err


format_decoders: Mapping[ReportFormat, Callable[[bytes], str]] = {
    ReportFormat.ZIP: decode_zip,
    ReportFormat.GZIP: decode_gzip,
    ReportFormat.XML: decode_xml,
}


def decode_attachment(attachment: ReportAttachment) -> str:
    logger.debug(
        "Decoding report attachment.",
        content_type=attachment.content_type,
        filename=attachment.filename,
        report_format=attachment.format.name,
    )
    return format_decoders[attachment.format](attachment.payload)


def _is_repeated_element(path: List[Tuple[str, Any]], key: str, _value: Any) -> bool:
    return bool(path) and (path[-1][0], key) in REPEATED_ELEMENTS


def parse_feedback(xml: str) -> Feedback:
    try:
        document = xmltodict.parse(
            xml, xml_attribs=False, force_list=_is_repeated_element
        )
    except (ExpatError, ValueError) as err:
        raise ReportParseError(f"Failed to parse report XML: {err}") from err

    if not isinstance(document, dict) or "feedback" not in document:
        raise ReportParseError(
            "Failed to parse report XML: root element is not <feedback>."
        )

    try:
        feedback = Feedback.model_validate(
            document["feedback"], by_alias=True, by_name=False
        )
    except ValidationError as err:
        raise ReportParseError(f"Invalid aggregate report: {err}") from err
    logger.debug(
        "Decoded aggregate report.",
        report_id=feedback.report_metadata.report_id,
        records=len(feedback.records),
    )
    return feedback


def get_aggregate_report_from_email(msg: EmailMessage) -> Feedback:
    attachment = locate_report_attachment(msg)
    return parse_feedback(decode_attachment(attachment))


def parse_email(raw_message: Union[bytes, str]) -> EmailMessage:
    if isinstance(raw_message, str):
        raw_message = raw_message.encode("utf-8", "surrogateescape")
    elif not isinstance(raw_message, (bytes, bytearray)):
        raise ReportParseError(
            "Failed to parse email: expected bytes or str, "
            f"got {type(raw_message).__name__}."
        )
    try:
        return cast(
            EmailMessage,
            email.message_from_bytes(raw_message, policy=email.policy.default),
        )
    except MessageError as err:
        raise ReportParseError(f"Failed to parse email: {err}") from err


def parse_report_message(raw_message: Union[bytes, str]) -> Feedback:
    """Extract and decode the DMARC aggregate report attached to an email.

    The first immediate subpart of the message (or the message itself, if it
    is not multipart) that holds a zip archive, gzip stream or XML document
    is decoded into a :class:`Feedback`.

    Raises:
        ReportParseError: if no report attachment is found or any stage of
            decoding fails.
    """
    return get_aggregate_report_from_email(parse_email(raw_message))
