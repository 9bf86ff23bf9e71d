import openpyxl
from openpyxl.styles import Font, Border, Side, PatternFill
from pathlib import Path
from typing import Optional
import logging
import re
from ..models.payroll import EmployeeSalaryBreakdown
from config.settings import OUTPUT_DIR

logger = logging.getLogger(__name__)

MONEY_FORMAT = '#,##0.00'

class PayslipGenerator:
    """Generate individual payslip Excel files"""

    def __init__(self, output_dir: Optional[Path] = None):
        self.output_dir = Path(output_dir) if output_dir else OUTPUT_DIR / "payslips"
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def generate(self, breakdown: EmployeeSalaryBreakdown, period_label: str = "") -> str:
        """Generate payslip Excel file"""

        # Create workbook
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "Payslip"

        # Set column widths
        ws.column_dimensions['A'].width = 30
        ws.column_dimensions['B'].width = 18
        ws.column_dimensions['C'].width = 30
        ws.column_dimensions['D'].width = 18

        # Define styles
        header_font = Font(bold=True, size=12)
        bold_font = Font(bold=True)
        header_fill = PatternFill(start_color="B4C7E7", end_color="B4C7E7", fill_type="solid")
        thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        # Header section
        row = 1
        ws.merge_cells(f'A{row}:D{row}')
        ws[f'A{row}'] = "PAYSLIP"
        ws[f'A{row}'].font = header_font

        row = 2
        ws[f'A{row}'] = "Employee"
        ws[f'B{row}'] = breakdown.employee_name
        ws[f'C{row}'] = "Employee code"
        ws[f'D{row}'] = breakdown.employee_code

        row = 3
        ws[f'A{row}'] = "Salary structure"
        ws[f'B{row}'] = breakdown.structure_name
        ws[f'C{row}'] = "Pay period"
        ws[f'D{row}'] = period_label

        row = 4
        ws[f'A{row}'] = "Working days"
        ws[f'B{row}'] = breakdown.working_days
        ws[f'C{row}'] = "LOP days"
        ws[f'D{row}'] = breakdown.lop_days

        row = 5
        ws[f'A{row}'] = "Payable days"
        ws[f'B{row}'] = breakdown.payable_days

        # Earnings and deductions side by side
        row = 7
        for col, title in zip('ABCD', ("Earnings", "Amount", "Deductions", "Amount")):
            cell = ws[f'{col}{row}']
            cell.value = title
            cell.font = bold_font
            cell.fill = header_fill
            cell.border = thin_border

        first_item_row = row + 1
        for offset, item in enumerate(breakdown.earnings):
            self._write_item(ws, first_item_row + offset, 'A', 'B', item)
        for offset, item in enumerate(breakdown.deductions):
            self._write_item(ws, first_item_row + offset, 'C', 'D', item)

        row = first_item_row + max(len(breakdown.earnings), len(breakdown.deductions))

        # Totals
        ws[f'A{row}'] = "Total earnings"
        ws[f'B{row}'] = float(breakdown.total_earnings)
        ws[f'C{row}'] = "Total deductions"
        ws[f'D{row}'] = float(breakdown.total_deductions)
        for col in 'ABCD':
            ws[f'{col}{row}'].font = bold_font
            ws[f'{col}{row}'].border = thin_border
        ws[f'B{row}'].number_format = MONEY_FORMAT
        ws[f'D{row}'].number_format = MONEY_FORMAT
        row += 2

        ws[f'A{row}'] = "Gross pay"
        ws[f'B{row}'] = float(breakdown.gross_pay)
        ws[f'B{row}'].number_format = MONEY_FORMAT
        row += 1

        # Net payment
        ws[f'A{row}'] = "Net pay"
        ws[f'A{row}'].font = Font(bold=True, size=14)
        ws[f'B{row}'] = float(breakdown.net_pay)
        ws[f'B{row}'].font = Font(bold=True, size=14)
        ws[f'B{row}'].number_format = MONEY_FORMAT

        # Generate filename
        suffix = f"_{_slug(period_label)}" if period_label else ""
        filename = f"{_slug(breakdown.employee_code or breakdown.employee_id)}{suffix}_payslip.xlsx"
        filepath = self.output_dir / filename

        # Save workbook
        wb.save(filepath)
        logger.debug(f"Payslip written to {filepath}")

        return str(filepath)

    def _write_item(self, ws, row, name_col, amount_col, item):
        ws[f'{name_col}{row}'] = item.name
        ws[f'{amount_col}{row}'] = float(item.amount)
        ws[f'{amount_col}{row}'].number_format = MONEY_FORMAT


def _slug(value: str) -> str:
    return re.sub(r'[^A-Za-z0-9_-]+', '-', str(value)).strip('-') or 'unnamed'
