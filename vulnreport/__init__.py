"""Shared data model for check vulnerability reports."""

from vulnreport.codec import DecodeError, EncodeError, decode, decode_native, encode, encode_native
from vulnreport.models import (
    Attachment,
    CheckData,
    Report,
    ResourcesGroup,
    ResultData,
    Vulnerability,
)
from vulnreport.scoring import (
    SeverityRank,
    aggregate_score,
    rank_severity,
    score_for_severity,
    security_status,
)
from vulnreport.validation import ValidationError, validate_report, validate_vulnerability

__all__ = [
    "Attachment",
    "CheckData",
    "DecodeError",
    "EncodeError",
    "Report",
    "ResourcesGroup",
    "ResultData",
    "SeverityRank",
    "ValidationError",
    "Vulnerability",
    "aggregate_score",
    "decode",
    "decode_native",
    "encode",
    "encode_native",
    "rank_severity",
    "score_for_severity",
    "security_status",
    "validate_report",
    "validate_vulnerability",
]
