"""Unit tests for the pure parts of the reporting service."""

from datetime import date, datetime, timezone

import pytest

from carelog.application.services import ReportingService, build_export_rows, count_weekdays
from carelog.application.services.reporting_service import _percentage
from carelog.domain.entities import (
    ActingUser,
    AppointmentType,
    ExportFormat,
    PatientEntry,
    ServiceLog,
)
from carelog.domain.exceptions import AuthenticationRequiredError, InvalidExportFormatError
from carelog.infrastructure.export import CsvExportWriter


class Untouchable:
    """Stands in for a repository that must not be used."""

    def __getattr__(self, name):
        raise AssertionError(f"unexpected repository call: {name}")


def _service() -> ReportingService:
    return ReportingService(
        Untouchable(),
        Untouchable(),
        Untouchable(),
        Untouchable(),
        Untouchable(),
        writers={ExportFormat.CSV: CsvExportWriter()},
    )


def _log(**overrides) -> ServiceLog:
    values = dict(
        id="log-1",
        user_id="user-a",
        client_id="1",
        activity_id="2",
        service_date=date(2024, 3, 4),
        patient_count=2,
        is_draft=False,
        submitted_at=datetime(2024, 3, 5, 9, 30, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return ServiceLog(**values)


# ── Rounding and calendars ──


@pytest.mark.parametrize(
    "part, whole, expected",
    [(3, 4, 75), (2, 10, 20), (1, 8, 13), (1, 3, 33), (2, 3, 67), (0, 0, 0), (5, 0, 0)],
)
def test_percentage_rounds_half_up(part, whole, expected):
    assert _percentage(part, whole) == expected


@pytest.mark.parametrize(
    "start, end, expected",
    [
        (date(2024, 3, 4), date(2024, 3, 8), 5),  # Mon..Fri
        (date(2024, 3, 9), date(2024, 3, 10), 0),  # weekend
        (date(2024, 3, 1), date(2024, 3, 31), 21),
        (date(2024, 3, 6), date(2024, 3, 6), 1),
        (date(2024, 3, 8), date(2024, 3, 4), 0),
    ],
)
def test_count_weekdays(start, end, expected):
    assert count_weekdays(start, end) == expected


# ── Row expansion ──


def test_log_without_entries_becomes_one_zero_row():
    rows = build_export_rows(_log(patient_count=0), [], {"1": "North"}, {"2": "Visit"}, {})

    assert len(rows) == 1
    values = rows[0].as_values()
    assert values[2:4] == ["North", "Visit"]
    assert values[6:10] == [0, 0, 0, ""]
    assert values[10] == "No"
    assert values[11] == "2024-03-05T09:30:00+00:00"


def test_each_entry_becomes_one_row_with_its_type_flag():
    entries = [
        PatientEntry(service_log_id="log-1", appointment_type=t, outcome_id="9")
        for t in (AppointmentType.NEW, AppointmentType.DNA)
    ]

    rows = build_export_rows(_log(), entries, {}, {}, {"9": "Improved"})

    assert [(r.new_patients, r.followup_patients, r.dna_count) for r in rows] == [
        (1, 0, 0),
        (0, 0, 1),
    ]
    assert {r.primary_outcome for r in rows} == {"Improved"}
    assert {r.total_patient_count for r in rows} == {2}


def test_missing_names_fall_back_to_unknown_labels():
    entry = PatientEntry(
        service_log_id="log-1", appointment_type=AppointmentType.FOLLOWUP, outcome_id="404"
    )

    row = build_export_rows(_log(is_draft=True, submitted_at=None), [entry], {}, {}, {})[0]

    assert row.client_name == "Unknown Client"
    assert row.activity_name == "Unknown Activity"
    assert row.primary_outcome == "Unknown Outcome"
    assert row.as_values()[10:12] == ["Yes", ""]


# ── Export request validation ──


def test_unsupported_format_is_rejected_before_any_read():
    with pytest.raises(InvalidExportFormatError) as exc_info:
        _service().export_service_logs(ActingUser(id="user-a"), None, "pdf")
    assert exc_info.value.field == "format"


def test_known_format_without_writer_is_rejected():
    with pytest.raises(InvalidExportFormatError):
        _service().export_service_logs(ActingUser(id="user-a"), None, "excel")


def test_export_requires_an_acting_user():
    with pytest.raises(AuthenticationRequiredError):
        _service().export_service_logs(None, None, "csv")


def test_export_is_lazy_until_iterated():
    result = _service().export_service_logs(
        ActingUser(id="user-a"), None, "csv", today=date(2024, 1, 31)
    )

    assert result.filename == "service-logs-export-2024-01-31.csv"
    assert result.media_type.startswith("text/csv")
