import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence

from .breakdown_calculator import calculate_employee_breakdown
from ..models.employee import Employee
from ..models.payroll import DAYS_IN_MONTH, EmployeeSalaryBreakdown, PayrollComponent, PayrollRun, SalaryStructure

logger = logging.getLogger(__name__)


class PayrollRunner:
    """Calculate breakdowns for every employee with a salary structure"""

    def __init__(
        self,
        catalog: Sequence[PayrollComponent],
        structures: Sequence[SalaryStructure],
        default_working_days: int = DAYS_IN_MONTH,
    ):
        # snapshot so later catalog edits don't leak into a running calculation
        self.catalog = list(catalog)
        self.structures = {s.id: s for s in structures}
        self.default_working_days = default_working_days

    def eligible_employees(self, employees: Sequence[Employee]) -> List[Employee]:
        """Employees that have a salary structure assigned"""
        return [e for e in employees if e.salary_structure_id]

    def calculate(self, employees: Sequence[Employee], working_days: Optional[int] = None) -> List[EmployeeSalaryBreakdown]:
        """Calculate breakdowns without saving a run"""
        working_days = normalize_working_days(working_days, self.default_working_days)
        eligible = self.eligible_employees(employees)
        if not eligible:
            raise ValueError("No employees with salary structures assigned")

        breakdowns = []
        for employee in eligible:
            structure = self.structures.get(employee.salary_structure_id)
            if structure is None:
                logger.warning(
                    "Skipping %s: salary structure %s not found",
                    employee, employee.salary_structure_id
                )
                continue
            breakdowns.append(
                calculate_employee_breakdown(employee, structure, self.catalog, working_days)
            )

        logger.info(f"Payroll calculated for {len(breakdowns)} employees")
        return breakdowns

    def run(self, employees: Sequence[Employee], working_days: Optional[int] = None) -> PayrollRun:
        """Calculate breakdowns and wrap them in a payroll run"""
        working_days = normalize_working_days(working_days, self.default_working_days)
        breakdowns = self.calculate(employees, working_days)
        return PayrollRun(
            id=uuid.uuid4().hex,
            date=datetime.now().isoformat(),
            working_days=working_days,
            breakdowns=tuple(breakdowns),
            total_payroll=total_net_pay(breakdowns),
        )


def run_payroll(
    employees: Sequence[Employee],
    structures: Sequence[SalaryStructure],
    catalog: Sequence[PayrollComponent],
    working_days: Optional[int] = None,
    default_working_days: int = DAYS_IN_MONTH,
) -> PayrollRun:
    """Run payroll for all eligible employees"""
    return PayrollRunner(catalog, structures, default_working_days).run(employees, working_days)


def normalize_working_days(working_days, default: int = DAYS_IN_MONTH) -> int:
    """Working days as entered, or the default when missing or not positive"""
    try:
        days = int(working_days)
    except (TypeError, ValueError):
        return default
    return days if days > 0 else default


def total_net_pay(breakdowns: Sequence[EmployeeSalaryBreakdown]) -> Decimal:
    return sum((b.net_pay for b in breakdowns), Decimal('0'))
