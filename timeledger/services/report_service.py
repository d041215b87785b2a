"""
Timesheet Report Service.

Renders the viewed week two ways:
- a matrix CSV where days are columns and user/task pairs are rows
- a text summary rendered from a Jinja2 template

Architecture Decision: Template Pattern
Allows users to customize the summary without changing code.
"""

import csv
import datetime
import io
import logging
from pathlib import Path
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader

from timeledger.services import aggregation_service as agg
from timeledger.services.directory import NameDirectory
from timeledger.services.ledger_service import TimeLedger
from timeledger.services.week_cursor import WeekCursor
from timeledger.utils import format_clock, format_duration, format_hours, get_resource_path

logger = logging.getLogger(__name__)


def _hours_cell(seconds: int) -> str:
    return format_hours(seconds) if seconds > 0 else ""


class TimesheetReportService:
    """
    Generates weekly timesheet reports from the ledger.
    """

    def __init__(self, ledger: TimeLedger, directory: NameDirectory,
                 template_dir: Optional[Path] = None):
        """
        Initialize the report service.

        Args:
            ledger: Source of time entries
            directory: Display names for users, tasks and projects
            template_dir: Directory containing Jinja2 templates
        """
        self.ledger = ledger
        self.directory = directory

        if template_dir is None:
            template_dir = get_resource_path("resources/templates")
        self.template_dir = template_dir

        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True
        )

        # Add custom filters
        self.env.filters['format_duration'] = format_duration
        self.env.filters['format_hours'] = format_hours
        self.env.filters['format_clock'] = format_clock
        self.env.filters['format_date'] = self._format_date

    @staticmethod
    def _format_date(value: datetime.date, fmt: str = "%a, %d. %b %y") -> str:
        return value.strftime(fmt)

    def _build_context(self, cursor: WeekCursor, user_id: Optional[str]) -> dict:
        entries = agg.week_entries(self.ledger, cursor, user_id)
        grand_total = agg.total_duration(entries)
        days = cursor.week_days()

        users = []
        for group in agg.group_by_user_and_task(
            entries,
            self.directory.resolve_user_name,
            self.directory.resolve_task_name,
            self.directory.resolve_project_name
        ):
            tasks = []
            for task in group.tasks:
                tasks.append({
                    'task': task,
                    'daily': agg.daily_totals(task.entries, days),
                })
            users.append({
                'group': group,
                'tasks': tasks,
                'daily': agg.daily_totals(
                    [entry for task in group.tasks for entry in task.entries], days
                ),
                'percentage': agg.percentage_of_total(group.total_duration, grand_total),
            })

        projects = agg.group_by_project_members(agg.group_by_user_and_project(
            entries,
            self.directory.resolve_project_name,
            self.directory.resolve_user_name
        ))

        return {
            'week_start': cursor.week_start,
            'week_end': cursor.week_end,
            'days': days,
            'users': users,
            'projects': [
                {
                    'project': project,
                    'percentage': agg.percentage_of_total(project.total_duration, grand_total),
                    'members': [
                        {
                            'member': member,
                            'percentage': agg.percentage_of_total(member.total_duration, project.total_duration),
                        }
                        for member in project.members
                    ],
                }
                for project in projects
            ],
            'day_totals': agg.daily_totals(entries, days),
            'total_seconds': grand_total,
            'generated_at': datetime.datetime.now(),
        }

    def generate_summary(self, cursor: WeekCursor, user_id: Optional[str] = None,
                         template_name: str = "weekly_report.txt",
                         output_file: Optional[Path] = None) -> str:
        """
        Render the weekly summary.

        Args:
            cursor: The week to report on
            user_id: Restrict the report to one user
            template_name: Template file inside the template directory
            output_file: Optional file path to save the report

        Returns:
            The generated report as a string
        """
        template = self.env.get_template(template_name)
        content = template.render(**self._build_context(cursor, user_id))

        if output_file:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            with open(output_file, 'w', encoding='utf-8') as f:
                f.write(content)
            logger.info(f"Weekly summary written to {output_file}")

        return content

    def generate_matrix_csv(self, cursor: WeekCursor, user_id: Optional[str] = None) -> str:
        """
        Week matrix: one row per user/task, one column per day, plus totals.

        Hours use two decimals; the separator is a semicolon for Excel.
        """
        context = self._build_context(cursor, user_id)
        days: List[datetime.date] = context['days']

        output = io.StringIO()
        writer = csv.writer(output, delimiter=';', lineterminator='\n')

        writer.writerow(["User", "Task", "Project", "Total hours"] + [self._format_date(d) for d in days])

        for user in context['users']:
            for row in user['tasks']:
                task = row['task']
                writer.writerow(
                    [user['group'].user_name, task.task_name, task.project_name,
                     format_hours(task.total_duration)]
                    + [_hours_cell(row['daily'][d]) for d in days]
                )

        writer.writerow([])
        writer.writerow(
            ["Total", "", "", format_hours(context['total_seconds'])]
            + [_hours_cell(context['day_totals'][d]) for d in days]
        )

        return output.getvalue()

    def list_templates(self) -> List[str]:
        """List all available template files"""
        return sorted(
            [f.name for f in self.template_dir.glob("*.txt")] +
            [f.name for f in self.template_dir.glob("*.md")]
        )
