"""Structural validation for reports and vulnerability groups."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, NoReturn

if TYPE_CHECKING:
    from vulnreport.models import Report, Vulnerability

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    """A report or vulnerability is missing a required field or breaks a structural rule."""


def validate_report(report: Report) -> None:
    """Raise ValidationError for the first problem found in a report."""
    # Must have basic check information.
    if not report.check_id:
        _fail("report is missing check ID")
    if not report.checktype_name:
        _fail("report is missing check type name")
    if not report.checktype_version:
        _fail("report is missing check type version")

    # Must have basic check job information.
    if not report.target:
        _fail("report is missing target")
    if not report.status:
        _fail("report is missing status")

    if report.start_time is None:
        _fail("report is missing start time")

    for vulnerability in report.vulnerabilities:
        validate_vulnerability(vulnerability)


def validate_vulnerability(vulnerability: Vulnerability) -> None:
    """Raise ValidationError if a vulnerability or any of its children is invalid.

    Groups may only be one level deep: a child vulnerability must not have
    children of its own.
    """
    if not vulnerability.summary:
        _fail("vulnerability group is missing summary")

    for child in vulnerability.vulnerabilities:
        validate_vulnerability(child)
        if child.vulnerabilities:
            _fail("child vulnerabilities are not allowed to have children")


def _fail(message: str) -> NoReturn:
    logger.debug("validation failed: %s", message)
    raise ValidationError(message)
