"""
Reporting and Export Module for Shift Roster

Formats employee lists and schedules for the terminal and exports an
employee's schedule to CSV, Excel or PDF.
"""

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional
import logging

from .data_manager import Employee, Shift
from .scheduler_logic import ShiftRoster, OperationResult, compute_shift_duration

logger = logging.getLogger(__name__)

SCHEDULE_HEADER = "date,startTime,endTime"
SCHEDULE_COLUMNS = ["date", "startTime", "endTime"]

ID_WIDTH = 11
PHONE_WIDTH = 9
MIN_NAME_WIDTH = 4


def _max_name_width(employees: List[Employee]) -> int:
    return max([MIN_NAME_WIDTH] + [len(emp.name) for emp in employees])


def format_employee_table(employees: List[Employee]) -> List[str]:
    """Fixed-width table lines: header, dash row, one row per employee"""
    name_width = _max_name_width(employees)

    def row(emp_id: str, name: str, phone: str) -> str:
        return " ".join([emp_id.ljust(ID_WIDTH), name.ljust(name_width), phone.ljust(PHONE_WIDTH)])

    lines = [
        row("Employee ID", "Name", "Phone"),
        row("-" * 11, "-" * 19, "-" * 9),
    ]
    for emp in employees:
        lines.append(row(emp.employee_id, emp.name, emp.phone))
    return lines


def format_schedule_line(shift: Shift) -> str:
    return f"{shift.date},{shift.start_time},{shift.end_time}"


def format_schedule_lines(rows: List[Shift]) -> List[str]:
    """Header followed by one date,startTime,endTime line per shift"""
    return [SCHEDULE_HEADER] + [format_schedule_line(s) for s in rows]


class ReportGenerator:
    """Builds schedule exports for a single employee"""

    def __init__(self, roster: ShiftRoster):
        self.roster = roster
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        """Setup custom report styles"""
        self.styles.add(ParagraphStyle(
            name='CustomTitle',
            parent=self.styles['Heading1'],
            fontSize=18,
            spaceAfter=30,
            alignment=1  # Center alignment
        ))

    def _load_schedule(self, employee_id: str) -> Optional[OperationResult]:
        result = self.roster.get_schedule_hours(employee_id)
        if not result.ok:
            logger.error(f"Cannot export schedule, employee {employee_id!r} does not exist")
            return None
        return result

    def _find_employee_name(self, employee_id: str) -> str:
        emp = self.roster.record_store.find_employee(employee_id.strip())
        return emp.name if emp else employee_id

    def _create_schedule_dataframe(self, rows: List[Shift]) -> pd.DataFrame:
        """Create schedule DataFrame with one row per shift"""
        data = []
        for shift in rows:
            data.append({
                'date': shift.date,
                'startTime': shift.start_time,
                'endTime': shift.end_time,
                'shiftId': shift.shift_id,
                'hours': compute_shift_duration(shift.start_time, shift.end_time)
            })
        return pd.DataFrame(data, columns=SCHEDULE_COLUMNS + ['shiftId', 'hours'])

    def _create_summary_dataframe(self, employee_id: str, result: OperationResult) -> pd.DataFrame:
        return pd.DataFrame([
            {'Metric': 'Employee ID', 'Value': employee_id},
            {'Metric': 'Name', 'Value': self._find_employee_name(employee_id)},
            {'Metric': 'Shifts', 'Value': len(result.rows)},
            {'Metric': 'Total Hours', 'Value': result.total_hours},
            {'Metric': 'Max Daily Hours', 'Value': self.roster.max_daily_hours},
        ])

    def export_schedule_csv(self, employee_id: str, output_path: str) -> bool:
        """Export schedule to CSV with the same columns the terminal shows"""
        try:
            result = self._load_schedule(employee_id)
            if result is None:
                return False

            schedule_df = self._create_schedule_dataframe(result.rows)
            schedule_df[SCHEDULE_COLUMNS].to_csv(output_path, index=False)
            return True

        except Exception as e:
            logger.error(f"Error exporting to CSV: {e}", exc_info=True)
            return False

    def export_schedule_excel(self, employee_id: str, output_path: str) -> bool:
        """Export schedule and summary sheets to an Excel workbook"""
        try:
            result = self._load_schedule(employee_id)
            if result is None:
                return False

            with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
                schedule_df = self._create_schedule_dataframe(result.rows)
                schedule_df.to_excel(writer, sheet_name='Schedule', index=False)

                summary_df = self._create_summary_dataframe(employee_id, result)
                summary_df.to_excel(writer, sheet_name='Summary', index=False)

                self._format_excel_worksheets(writer)

            return True

        except Exception as e:
            logger.error(f"Error exporting to Excel: {e}", exc_info=True)
            return False

    def _format_excel_worksheets(self, writer):
        """Bold headers and widen columns to fit their content"""
        from openpyxl.styles import Font

        for worksheet in writer.sheets.values():
            for cell in worksheet[1]:
                cell.font = Font(bold=True)
            for column in worksheet.columns:
                max_length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
                worksheet.column_dimensions[column[0].column_letter].width = min(max_length + 2, 50)

    def export_schedule_pdf(self, employee_id: str, output_path: str) -> bool:
        """Export schedule to a one-table PDF"""
        try:
            result = self._load_schedule(employee_id)
            if result is None:
                return False

            doc = SimpleDocTemplate(
                output_path,
                pagesize=A4,
                rightMargin=0.75*inch,
                leftMargin=0.75*inch,
                topMargin=0.75*inch,
                bottomMargin=0.75*inch
            )

            name = self._find_employee_name(employee_id)
            story = [
                Paragraph(f"Shift Schedule - {name} ({employee_id.strip()})", self.styles['CustomTitle']),
                self._create_schedule_table(result.rows),
                Spacer(1, 20),
                Paragraph(
                    f"Shifts: {len(result.rows)} &nbsp;&nbsp; Total hours: {result.total_hours:g}",
                    self.styles['Normal']
                ),
            ]

            doc.build(story)
            return True

        except Exception as e:
            logger.error(f"Error creating PDF: {e}", exc_info=True)
            return False

    def _create_schedule_table(self, rows: List[Shift]) -> Table:
        data = [['Date', 'Start', 'End', 'Hours']]
        for shift in rows:
            hours = compute_shift_duration(shift.start_time, shift.end_time)
            data.append([shift.date, shift.start_time, shift.end_time, f"{hours:g}"])

        table = Table(data, colWidths=[1.6*inch, 1.2*inch, 1.2*inch, 1*inch], repeatRows=1)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 10),
            ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
            ('GRID', (0, 0), (-1, -1), 1, colors.black),
        ]))
        return table


class ExportManager:
    """Manager class for handling all export operations"""

    FORMATS = ('csv', 'excel', 'pdf')
    EXTENSIONS = {'csv': 'csv', 'excel': 'xlsx', 'pdf': 'pdf'}

    def __init__(self, roster: ShiftRoster):
        self.roster = roster
        self.report_generator = ReportGenerator(roster)

    def export_schedule(self, employee_id: str, format_type: str, output_path: str) -> bool:
        """Export an employee's schedule in the specified format"""
        if format_type.lower() == 'pdf':
            return self.report_generator.export_schedule_pdf(employee_id, output_path)
        elif format_type.lower() == 'excel':
            return self.report_generator.export_schedule_excel(employee_id, output_path)
        elif format_type.lower() == 'csv':
            return self.report_generator.export_schedule_csv(employee_id, output_path)
        else:
            raise ValueError(f"Unsupported format: {format_type}")

    def get_default_filename(self, employee_id: str, format_type: str) -> str:
        """Generate default filename for export"""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        extension = self.EXTENSIONS.get(format_type.lower(), format_type.lower())
        return f"schedule_{employee_id.strip()}_{timestamp}.{extension}"

    def batch_export(self, employee_id: str, output_dir: str,
                     formats: List[str] = None) -> Dict[str, bool]:
        """Export a schedule in several formats into one directory"""
        if formats is None:
            formats = list(self.FORMATS)

        results = {}
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        for format_type in formats:
            file_path = output_path / self.get_default_filename(employee_id, format_type)
            try:
                results[format_type] = self.export_schedule(employee_id, format_type, str(file_path))
            except ValueError as e:
                logger.error(f"Error exporting {format_type}: {e}")
                results[format_type] = False

        return results
