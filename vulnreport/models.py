"""Data models for check reports and the vulnerabilities they contain."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from vulnreport.scoring import SeverityRank, aggregate_score, rank_severity
from vulnreport.validation import validate_report, validate_vulnerability

_TIMESTAMP_FIELDS = ("start_time", "end_time")


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class Attachment:
    """A file found when running the check."""

    name: str = ""
    content_type: str = ""
    data: bytes = b""


@dataclass
class ResourcesGroup:
    """A named table of resources sharing the same attributes.

    Example:

        name: Network Resource
        header: | Hostname | Port | Protocol | Service |
        rows:   | www.example.com | 80  | tcp | http |
                | www.example.com | 443 | tcp | http |

    Each row maps every column in ``header`` to its value.
    """

    name: str = ""
    header: list[str] = field(default_factory=list)
    rows: list[dict[str, str]] = field(default_factory=list)


@dataclass
class Vulnerability:
    """A single finding, or a group of related findings under one summary."""

    # Arbitrary identifier, unique within a single scan.
    id: str = ""
    summary: str = ""
    # CVSSv3 base score.
    score: float = 0.0

    cwe_id: int = 0
    description: str = ""
    details: str = ""
    impact_details: str = ""
    recommendations: list[str] = field(default_factory=list)
    references: list[str] = field(default_factory=list)
    resources: list[ResourcesGroup] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)

    vulnerabilities: list["Vulnerability"] = field(default_factory=list)

    def add_vulnerabilities(self, *vulnerabilities: "Vulnerability") -> None:
        self.vulnerabilities.extend(vulnerabilities)

    def recompute_score(self) -> None:
        """Set the score of a group from its children. Leaves leaf scores untouched."""
        if self.vulnerabilities:
            self.score = aggregate_score(self.vulnerabilities)

    def severity(self) -> SeverityRank:
        return rank_severity(self.score)

    def validate(self) -> None:
        validate_vulnerability(self)


@dataclass
class CheckData:
    """Data about the check execution that generated a report."""

    check_id: str = ""
    checktype_name: str = ""
    checktype_version: str = ""

    status: str = ""

    target: str = ""
    options: str = ""
    tag: str = ""

    start_time: datetime | None = None
    end_time: datetime | None = None

    def __setattr__(self, name, value):
        # Timestamps are held as UTC-aware datetimes; naive values are taken as UTC.
        if name in _TIMESTAMP_FIELDS and value is not None:
            value = as_utc(value)
        super().__setattr__(name, value)


@dataclass
class ResultData:
    """Outcome of a check run: vulnerabilities, notes, errors."""

    vulnerabilities: list[Vulnerability] = field(default_factory=list)

    data: bytes = b""
    notes: str = ""
    # Empty means no error.
    error: str = ""

    not_applicable: bool = False

    def add_vulnerabilities(self, *vulnerabilities: Vulnerability) -> None:
        self.vulnerabilities.extend(vulnerabilities)


@dataclass
class Report(CheckData, ResultData):
    """A check vulnerability report: check data and result data as one flat record."""

    def validate(self) -> None:
        validate_report(self)

    @classmethod
    def from_parts(cls, check_data: CheckData, result_data: ResultData | None = None) -> "Report":
        """Compose a report from its check data and result data halves."""
        result_data = result_data or ResultData()
        return cls(
            check_id=check_data.check_id,
            checktype_name=check_data.checktype_name,
            checktype_version=check_data.checktype_version,
            status=check_data.status,
            target=check_data.target,
            options=check_data.options,
            tag=check_data.tag,
            start_time=check_data.start_time,
            end_time=check_data.end_time,
            vulnerabilities=list(result_data.vulnerabilities),
            data=result_data.data,
            notes=result_data.notes,
            error=result_data.error,
            not_applicable=result_data.not_applicable,
        )
