from .dmarc_aggregate_report import (
    LEGACY_DKIM_RESULTS,
    REPEATED_ELEMENTS,
    Alignment,
    AuthResults,
    DateRange,
    DkimAuthResult,
    DkimResult,
    Disposition,
    DmarcResult,
    Feedback,
    Identifier,
    PolicyEvaluated,
    PolicyOverride,
    PolicyOverrideReason,
    PolicyPublished,
    Record,
    ReportElement,
    ReportMetadata,
    Row,
    SpfAuthResult,
    SpfDomainScope,
    SpfResult,
)

__all__ = [
    "LEGACY_DKIM_RESULTS",
    "REPEATED_ELEMENTS",
    "Alignment",
    "AuthResults",
    "DateRange",
    "DkimAuthResult",
    "DkimResult",
    "Disposition",
    "DmarcResult",
    "Feedback",
    "Identifier",
    "PolicyEvaluated",
    "PolicyOverride",
    "PolicyOverrideReason",
    "PolicyPublished",
    "Record",
    "ReportElement",
    "ReportMetadata",
    "Row",
    "SpfAuthResult",
    "SpfDomainScope",
    "SpfResult",
]
