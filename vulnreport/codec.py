"""JSON wire encoding for reports.

Two encode/decode pairs share one field mapping and differ only in how
``start_time`` and ``end_time`` are written:

* ``encode`` / ``decode`` write the legacy ``YYYY-MM-DD hh:mm:ss`` string
  that downstream consumers of the report feed expect. Sub-second precision
  is truncated on encode.
* ``encode_native`` / ``decode_native`` write RFC 3339 timestamps.

All timestamps are UTC. Naive datetimes are taken to already be in UTC.
"""

import base64
import binascii
import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable

from vulnreport.models import Attachment, Report, ResourcesGroup, Vulnerability, as_utc

logger = logging.getLogger(__name__)

TIME_LAYOUT = "%Y-%m-%d %H:%M:%S"
_TIME_LAYOUT_RE = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}")

# Zero time of the native encoding; stands for an unset timestamp.
NATIVE_ZERO_TIME = "0001-01-01T00:00:00Z"


class DecodeError(ValueError):
    """Input is not a well-formed report document."""


class EncodeError(ValueError):
    """A report holds a value that has no JSON representation."""


def encode(report: Report, indent: int | None = None) -> bytes:
    """Encode a report with legacy string timestamps."""
    doc = _report_to_dict(report)
    doc["start_time"] = format_time(report.start_time)
    doc["end_time"] = format_time(report.end_time)
    return _dump(doc, indent)


def decode(data: bytes | str) -> Report:
    """Decode a report whose timestamps use the legacy string layout."""
    doc = _load(data)
    report = _report_from_dict(doc)
    report.start_time = parse_time(doc.get("start_time"), "start_time")
    report.end_time = parse_time(doc.get("end_time"), "end_time")
    return report


def encode_native(report: Report, indent: int | None = None) -> bytes:
    """Encode a report with RFC 3339 timestamps."""
    doc = _report_to_dict(report)
    doc["start_time"] = format_native_time(report.start_time)
    doc["end_time"] = format_native_time(report.end_time)
    return _dump(doc, indent)


def decode_native(data: bytes | str) -> Report:
    """Decode a report whose timestamps are RFC 3339."""
    doc = _load(data)
    report = _report_from_dict(doc)
    report.start_time = parse_native_time(doc.get("start_time"), "start_time")
    report.end_time = parse_native_time(doc.get("end_time"), "end_time")
    return report


def format_time(value: datetime | None) -> str:
    if value is None:
        return ""
    v = as_utc(value)
    # strftime does not zero-pad years before 1000 on every platform
    return f"{v.year:04d}-{v.month:02d}-{v.day:02d} {v.hour:02d}:{v.minute:02d}:{v.second:02d}"


def parse_time(value: Any, name: str = "time") -> datetime | None:
    """Strictly parse a legacy timestamp. Absent or empty values are unset."""
    if value is None or value == "":
        return None
    if not isinstance(value, str) or not _TIME_LAYOUT_RE.fullmatch(value):
        raise DecodeError(f"{name} must match 'YYYY-MM-DD hh:mm:ss', got {value!r}")
    try:
        parsed = datetime.strptime(value, TIME_LAYOUT)
    except ValueError as exc:
        raise DecodeError(f"invalid {name} {value!r}: {exc}") from exc
    return parsed.replace(tzinfo=timezone.utc)


def format_native_time(value: datetime | None) -> str:
    if value is None:
        return NATIVE_ZERO_TIME
    return as_utc(value).isoformat().replace("+00:00", "Z")


def parse_native_time(value: Any, name: str = "time") -> datetime | None:
    if value is None or value == "" or value == NATIVE_ZERO_TIME:
        return None
    if not isinstance(value, str):
        raise DecodeError(f"{name} must be an RFC 3339 string, got {type(value).__name__}")
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise DecodeError(f"invalid {name} {value!r}: {exc}") from exc
    if parsed.tzinfo is None:
        raise DecodeError(f"{name} {value!r} has no UTC offset")
    return parsed.astimezone(timezone.utc)


def _dump(doc: dict, indent: int | None) -> bytes:
    try:
        out = json.dumps(doc, indent=indent, allow_nan=False).encode()
    except ValueError as exc:
        raise EncodeError(f"report {doc.get('check_id')!r} has a non-finite score: {exc}") from exc
    logger.debug("encoded report %s (%d bytes)", doc.get("check_id"), len(out))
    return out


def _reject_constant(token: str) -> float:
    raise DecodeError(f"non-finite number {token} in report JSON")


def _load(data: bytes | str) -> dict:
    try:
        doc = json.loads(data, parse_constant=_reject_constant)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(f"malformed report JSON: {exc}") from exc
    if not isinstance(doc, dict):
        raise DecodeError(f"report must be a JSON object, got {type(doc).__name__}")
    logger.debug("decoding report %s", doc.get("check_id"))
    return doc


# Encoding


def _encode_bytes(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _report_to_dict(report: Report) -> dict:
    doc: dict[str, Any] = {
        "check_id": report.check_id,
        "checktype_name": report.checktype_name,
        "checktype_version": report.checktype_version,
        "status": report.status,
        "target": report.target,
        "options": report.options,
        "tag": report.tag,
        "vulnerabilities": [_vulnerability_to_dict(v) for v in report.vulnerabilities],
    }
    if report.data:
        doc["data"] = _encode_bytes(report.data)
    if report.notes:
        doc["notes"] = report.notes
    doc["error"] = report.error
    if report.not_applicable:
        doc["not_applicable"] = True
    return doc


def _vulnerability_to_dict(v: Vulnerability) -> dict:
    doc: dict[str, Any] = {
        "id": v.id,
        "summary": v.summary,
        "score": v.score,
    }
    if v.cwe_id:
        doc["cwe_id"] = v.cwe_id
    if v.description:
        doc["description"] = v.description
    if v.details:
        doc["details"] = v.details
    if v.impact_details:
        doc["impact_details"] = v.impact_details
    if v.recommendations:
        doc["recommendations"] = list(v.recommendations)
    if v.references:
        doc["references"] = list(v.references)
    if v.resources:
        # Resource groups keep the capitalised keys existing consumers read.
        doc["resources"] = [
            {"Name": g.name, "Header": list(g.header), "Rows": [dict(row) for row in g.rows]}
            for g in v.resources
        ]
    if v.attachments:
        doc["attachments"] = [
            {"name": a.name, "content_type": a.content_type, "data": _encode_bytes(a.data)}
            for a in v.attachments
        ]
    doc["vulnerabilities"] = [_vulnerability_to_dict(child) for child in v.vulnerabilities]
    return doc


# Decoding


def _get(doc: dict, key: str, kind: type | tuple[type, ...], default: Any) -> Any:
    value = doc.get(key)
    if value is None:
        return default
    # bool is an int subclass; never accept it for numeric fields
    if isinstance(value, bool) and kind is not bool:
        raise DecodeError(f"{key} must be {_kind_name(kind)}, got bool")
    if not isinstance(value, kind):
        raise DecodeError(f"{key} must be {_kind_name(kind)}, got {type(value).__name__}")
    return value


def _kind_name(kind: type | tuple[type, ...]) -> str:
    if isinstance(kind, tuple):
        return " or ".join(k.__name__ for k in kind)
    return kind.__name__


def _get_list(doc: dict, key: str, item: Callable[[Any], Any]) -> list:
    return [item(entry) for entry in _get(doc, key, list, [])]


def _get_str_list(doc: dict, key: str) -> list[str]:
    def item(entry: Any) -> str:
        if not isinstance(entry, str):
            raise DecodeError(f"{key} entries must be strings, got {type(entry).__name__}")
        return entry

    return _get_list(doc, key, item)


def _get_bytes(doc: dict, key: str) -> bytes:
    raw = _get(doc, key, str, "")
    try:
        return base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"{key} is not valid base64: {exc}") from exc


def _expect_object(entry: Any, what: str) -> dict:
    if not isinstance(entry, dict):
        raise DecodeError(f"{what} must be a JSON object, got {type(entry).__name__}")
    return entry


def _report_from_dict(doc: dict) -> Report:
    return Report(
        check_id=_get(doc, "check_id", str, ""),
        checktype_name=_get(doc, "checktype_name", str, ""),
        checktype_version=_get(doc, "checktype_version", str, ""),
        status=_get(doc, "status", str, ""),
        target=_get(doc, "target", str, ""),
        options=_get(doc, "options", str, ""),
        tag=_get(doc, "tag", str, ""),
        vulnerabilities=_get_list(doc, "vulnerabilities", _vulnerability_from_dict),
        data=_get_bytes(doc, "data"),
        notes=_get(doc, "notes", str, ""),
        error=_get(doc, "error", str, ""),
        not_applicable=_get(doc, "not_applicable", bool, False),
    )


def _vulnerability_from_dict(entry: Any) -> Vulnerability:
    doc = _expect_object(entry, "vulnerability")
    cwe_id = _get(doc, "cwe_id", int, 0)
    if cwe_id < 0:
        raise DecodeError(f"cwe_id must be unsigned, got {cwe_id}")
    return Vulnerability(
        id=_get(doc, "id", str, ""),
        summary=_get(doc, "summary", str, ""),
        score=float(_get(doc, "score", (int, float), 0.0)),
        cwe_id=cwe_id,
        description=_get(doc, "description", str, ""),
        details=_get(doc, "details", str, ""),
        impact_details=_get(doc, "impact_details", str, ""),
        recommendations=_get_str_list(doc, "recommendations"),
        references=_get_str_list(doc, "references"),
        resources=_get_list(doc, "resources", _resources_group_from_dict),
        attachments=_get_list(doc, "attachments", _attachment_from_dict),
        vulnerabilities=_get_list(doc, "vulnerabilities", _vulnerability_from_dict),
    )


def _resources_group_from_dict(entry: Any) -> ResourcesGroup:
    doc = _expect_object(entry, "resources group")
    rows = []
    for row in _get(doc, "Rows", list, []):
        row = _expect_object(row, "resources row")
        if not all(isinstance(k, str) and isinstance(v, str) for k, v in row.items()):
            raise DecodeError("resources row values must be strings")
        rows.append(row)
    return ResourcesGroup(
        name=_get(doc, "Name", str, ""),
        header=_get_str_list(doc, "Header"),
        rows=rows,
    )


def _attachment_from_dict(entry: Any) -> Attachment:
    doc = _expect_object(entry, "attachment")
    return Attachment(
        name=_get(doc, "name", str, ""),
        content_type=_get(doc, "content_type", str, ""),
        data=_get_bytes(doc, "data"),
    )
