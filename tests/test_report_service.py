"""
Tests for weekly report generation.
"""

import datetime

import pytest

from timeledger.services.report_service import TimesheetReportService
from timeledger.services.week_cursor import WeekCursor

MONDAY = datetime.date(2026, 10, 19)


async def fill(ledger):
    entries = [
        ("task-1", "user-1", 0, 3600),
        ("task-1", "user-1", 2, 1800),
        ("task-3", "user-1", 2, 900),
        ("task-2", "user-2", 4, 5400),
        ("task-2", "user-2", 9, 7200),
    ]
    for task_id, user_id, offset, duration in entries:
        on = MONDAY + datetime.timedelta(days=offset)
        await ledger.add_entry(
            task_id=task_id,
            user_id=user_id,
            date=on,
            start_time=datetime.datetime.combine(on, datetime.time(9)),
            duration=duration
        )


@pytest.fixture
def service(ledger, directory):
    return TimesheetReportService(ledger, directory)


@pytest.fixture
def cursor():
    return WeekCursor(MONDAY)


class TestMatrixCsv:

    @pytest.mark.asyncio
    async def test_rows_per_user_and_task(self, service, ledger, cursor):
        await fill(ledger)

        lines = service.generate_matrix_csv(cursor).splitlines()

        header = lines[0].split(";")
        assert header[:4] == ["User", "Task", "Project", "Total hours"]
        assert len(header) == 4 + 7

        rows = [line.split(";") for line in lines[1:4]]
        assert rows[0][:4] == ["John Doe", "Design homepage", "LogicFlow Rebuild", "1.50"]
        assert rows[0][4:] == ["1.00", "", "0.50", "", "", "", ""]
        assert rows[1][:4] == ["John Doe", "Create timesheet view", "Mobile App", "0.25"]
        assert rows[2][:4] == ["Jane Smith", "Implement authentication", "LogicFlow Rebuild", "1.50"]

        assert lines[4] == ""
        total = lines[5].split(";")
        assert total[0] == "Total"
        assert total[3] == "3.25"
        assert total[4:] == ["1.00", "", "0.75", "", "1.50", "", ""]

    @pytest.mark.asyncio
    async def test_single_user(self, service, ledger, cursor):
        await fill(ledger)

        lines = service.generate_matrix_csv(cursor, "user-2").splitlines()

        assert len(lines) == 4
        assert lines[1].startswith("Jane Smith;")
        assert lines[3].split(";")[3] == "1.50"

    def test_empty_week(self, service, cursor):
        lines = service.generate_matrix_csv(cursor).splitlines()
        assert lines[1] == ""
        assert lines[2].split(";")[:4] == ["Total", "", "", "0.00"]


class TestSummary:

    @pytest.mark.asyncio
    async def test_summary_lists_users_and_projects(self, service, ledger, cursor):
        await fill(ledger)

        content = service.generate_summary(cursor)

        assert "Timesheet 2026-10-19 - 2026-10-25" in content
        assert "Total: 3h 15m (3.25h)" in content
        assert "John Doe: 1h 45m (53.8%)" in content
        assert "  - Design homepage [LogicFlow Rebuild]: 1h 30m" in content
        assert "Jane Smith: 1h 30m (46.2%)" in content
        assert "By project:" in content
        assert "LogicFlow Rebuild: 3h (92.3%)" in content
        assert "    John Doe: 1h 30m (50.0%)" in content
        assert "    Jane Smith: 1h 30m (50.0%)" in content

    def test_empty_summary(self, service, cursor):
        content = service.generate_summary(cursor)
        assert "No time recorded this week." in content
        assert "By project:" not in content

    @pytest.mark.asyncio
    async def test_summary_written_to_file(self, service, ledger, cursor, tmp_path):
        await fill(ledger)
        output = tmp_path / "reports" / "week.txt"

        content = service.generate_summary(cursor, "user-1", output_file=output)

        assert output.read_text(encoding="utf-8") == content
        assert "Jane Smith" not in content

    def test_custom_template_directory(self, ledger, directory, cursor, tmp_path):
        (tmp_path / "short.txt").write_text(
            "{{ week_start | format_date('%d.%m.%Y') }}: {{ total_seconds | format_hours }}",
            encoding="utf-8"
        )
        service = TimesheetReportService(ledger, directory, template_dir=tmp_path)

        assert service.generate_summary(cursor, template_name="short.txt") == "19.10.2026: 0.00"
        assert service.list_templates() == ["short.txt"]

    def test_bundled_templates(self, service):
        assert "weekly_report.txt" in service.list_templates()
