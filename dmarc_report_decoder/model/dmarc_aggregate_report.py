import re
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, FrozenSet, Optional, Tuple

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    IPvAnyAddress,
    NonNegativeInt,
    field_validator,
    model_validator,
)

# (parent element, element) pairs that may occur more than once. The plural
# forms are accepted as alternatives to the RFC 7489 element names.
REPEATED_ELEMENTS: FrozenSet[Tuple[str, str]] = frozenset(
    {
        ("feedback", "record"),
        ("report_metadata", "error"),
        ("report_metadata", "errors"),
        ("policy_evaluated", "reason"),
        ("policy_evaluated", "reasons"),
        ("auth_results", "spf"),
        ("auth_results", "dkim"),
    }
)

_DIGITS = re.compile(r"[0-9]+")


def require_digits(value: Any) -> Any:
    """Only accept unsigned decimal integers for wire values."""
    if isinstance(value, str) and not _DIGITS.fullmatch(value):
        raise ValueError(f"expected an unsigned integer, got {value!r}")
    return value


class Alignment(Enum):
    RELAXED = "r"
    STRICT = "s"


class Disposition(Enum):
    NONE_VALUE = "none"
    QUARANTINE = "quarantine"
    REJECT = "reject"


class DmarcResult(Enum):
    PASS_VALUE = "pass"
    FAIL = "fail"


class SpfResult(Enum):
    NONE_VALUE = "none"
    PASS_VALUE = "pass"
    FAIL = "fail"
    SOFTFAIL = "softfail"
    NEUTRAL = "neutral"
    TEMPERROR = "temperror"
    PERMERROR = "permerror"


class DkimResult(Enum):
    NONE_VALUE = "none"
    PASS_VALUE = "pass"
    FAIL = "fail"
    POLICY = "policy"
    NEUTRAL = "neutral"
    TEMPERROR = "temperror"
    PERMERROR = "permerror"


# Tokens written by reporters following the draft schema.
LEGACY_DKIM_RESULTS = {
    "unknown": DkimResult.TEMPERROR.value,
    "error": DkimResult.PERMERROR.value,
}


class PolicyOverride(Enum):
    FORWARDED = "forwarded"
    SAMPLED_OUT = "sampled_out"
    TRUSTED_FORWARDER = "trusted_forwarder"
    MAILING_LIST = "mailing_list"
    LOCAL_POLICY = "local_policy"
    OTHER = "other"


class SpfDomainScope(Enum):
    HELO = "helo"
    MFROM = "mfrom"


class ReportElement(BaseModel):
    """Base for all report sections.

    Instances are immutable. Fields are populated from the wire names
    (aliases) when decoding and may be given by their Python names when
    constructed directly.
    """

    model_config = ConfigDict(
        frozen=True, validate_by_name=True, validate_by_alias=True
    )

    @model_validator(mode="before")
    @classmethod
    def empty_element(cls, data: Any) -> Any:
        # An element without any content, e.g. <auth_results/>.
        if data is None:
            return {}
        return data


class DateRange(ReportElement):
    begin: datetime
    end: datetime

    @field_validator("begin", "end", mode="before")
    @classmethod
    def from_unix_timestamp(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value
        if not isinstance(value, str) or not _DIGITS.fullmatch(value):
            raise ValueError(f"expected a Unix timestamp in seconds, got {value!r}")
        try:
            return datetime.fromtimestamp(int(value), tz=timezone.utc)
        except (OverflowError, OSError) as err:
            raise ValueError(f"Unix timestamp {value} is out of range") from err


class ReportMetadata(ReportElement):
    org_name: str
    email: str
    extra_contact_info: Optional[str] = None
    report_id: str
    date_range: DateRange
    errors: Tuple[str, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("error", "errors")
    )


class PolicyPublished(ReportElement):
    domain: str
    dkim_alignment: Alignment = Field(alias="adkim")
    spf_alignment: Alignment = Field(alias="aspf")
    domain_policy: Disposition = Field(alias="p")
    subdomain_policy: Disposition = Field(alias="sp")
    # Bounded by the wire width only, not by the 0-100 of RFC 7489.
    percentage: int = Field(alias="pct", ge=0, le=255)
    failure_reporting: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("fo", "failure_reporting")
    )

    @field_validator("percentage", mode="before")
    @classmethod
    def percentage_digits(cls, value: Any) -> Any:
        return require_digits(value)


class PolicyOverrideReason(ReportElement):
    override_type: PolicyOverride = Field(
        validation_alias=AliasChoices("type", "override_type")
    )
    comment: Optional[str] = None


class PolicyEvaluated(ReportElement):
    disposition: Disposition
    dkim: DmarcResult
    spf: DmarcResult
    reasons: Tuple[PolicyOverrideReason, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("reason", "reasons")
    )


class Row(ReportElement):
    source_ip: IPvAnyAddress
    count: NonNegativeInt
    policy_evaluated: PolicyEvaluated

    @field_validator("count", mode="before")
    @classmethod
    def count_digits(cls, value: Any) -> Any:
        return require_digits(value)


class Identifier(ReportElement):
    envelope_to: Optional[str] = None
    envelope_from: Optional[str] = None
    header_from: str


class SpfAuthResult(ReportElement):
    domain: str
    scope: Optional[SpfDomainScope] = None
    result: SpfResult


class DkimAuthResult(ReportElement):
    domain: str
    selector: str
    result: DkimResult
    human_result: Optional[str] = None

    @field_validator("result", mode="before")
    @classmethod
    def map_legacy_result(cls, value: Any) -> Any:
        if isinstance(value, str):
            return LEGACY_DKIM_RESULTS.get(value, value)
        return value


class AuthResults(ReportElement):
    spf: Tuple[SpfAuthResult, ...] = ()
    dkim: Tuple[DkimAuthResult, ...] = ()


class Record(ReportElement):
    row: Row
    identifiers: Identifier
    auth_results: AuthResults


class Feedback(ReportElement):
    """A DMARC aggregate report (RFC 7489, appendix C)."""

    version: Optional[Decimal] = None
    report_metadata: ReportMetadata
    policy_published: PolicyPublished
    records: Tuple[Record, ...] = Field(default_factory=tuple, alias="record")
