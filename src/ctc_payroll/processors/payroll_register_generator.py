import openpyxl
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from pathlib import Path
from typing import Optional
import logging
from ..models.payroll import PayrollRun
from config.settings import OUTPUT_DIR

logger = logging.getLogger(__name__)

HEADERS = [
    "Employee code", "Employee", "Structure", "Working days", "LOP days", "Payable days",
    "Total earnings", "Total deductions", "Gross pay", "Net pay",
]
MONEY_COLUMNS = (7, 8, 9, 10)

class PayrollRegisterGenerator:
    """Generate the payroll register for a run (one row per employee)"""

    def __init__(self, output_dir: Optional[Path] = None):
        self.output_dir = Path(output_dir) if output_dir else OUTPUT_DIR / "registers"
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def generate(self, payroll_run: PayrollRun) -> str:
        """Generate payroll register Excel file"""

        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "Payroll Register"

        # Define styles
        bold_font = Font(bold=True)
        header_fill = PatternFill(start_color="B4C7E7", end_color="B4C7E7", fill_type="solid")
        total_fill = PatternFill(start_color="DDEBF7", end_color="DDEBF7", fill_type="solid")
        thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        # Title rows
        ws['A1'] = "PAYROLL REGISTER"
        ws['A1'].font = Font(bold=True, size=12)
        ws['A2'] = f"Run {payroll_run.id} - {payroll_run.date[:10]}"

        # Headers row
        row = 4
        for col, title in enumerate(HEADERS, start=1):
            cell = ws.cell(row=row, column=col, value=title)
            cell.font = bold_font
            cell.fill = header_fill
            cell.border = thin_border
            cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
            ws.column_dimensions[cell.column_letter].width = 22 if col <= 3 else 16

        # Data rows
        for breakdown in payroll_run.breakdowns:
            row += 1
            values = [
                breakdown.employee_code,
                breakdown.employee_name,
                breakdown.structure_name,
                breakdown.working_days,
                breakdown.lop_days,
                breakdown.payable_days,
                float(breakdown.total_earnings),
                float(breakdown.total_deductions),
                float(breakdown.gross_pay),
                float(breakdown.net_pay),
            ]
            for col, value in enumerate(values, start=1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = thin_border
                if col in MONEY_COLUMNS:
                    cell.number_format = '#,##0.00'

        # Totals row
        row += 1
        totals = {
            7: payroll_run.total_earnings,
            8: payroll_run.total_deductions,
            9: payroll_run.total_earnings,
            10: payroll_run.total_payroll,
        }
        ws.cell(row=row, column=1, value="TOTAL")
        for col in range(1, len(HEADERS) + 1):
            cell = ws.cell(row=row, column=col)
            if col in totals:
                cell.value = float(totals[col])
                cell.number_format = '#,##0.00'
            cell.font = bold_font
            cell.fill = total_fill
            cell.border = thin_border

        filename = f"payroll_register_{payroll_run.date[:10]}_{payroll_run.id[:8]}.xlsx"
        filepath = self.output_dir / filename
        wb.save(filepath)
        logger.info(f"Payroll register written to {filepath}")

        return str(filepath)
