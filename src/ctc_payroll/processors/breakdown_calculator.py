import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Sequence

from . import component_resolver
from ..models.employee import Employee
from ..models.payroll import (
    DAYS_IN_MONTH, EARNINGS, EmployeeSalaryBreakdown, LineItem,
    PayrollComponent, SalaryStructure
)

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def round_money(amount: Decimal) -> Decimal:
    """Round to whole cents, halves away from zero"""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_employee_breakdown(
    employee: Employee,
    structure: SalaryStructure,
    catalog: Sequence[PayrollComponent],
    working_days: int = DAYS_IN_MONTH,
) -> EmployeeSalaryBreakdown:
    """Calculate the monthly salary breakdown of one employee.

    Amounts are resolved for every component of the structure first, then
    loss-of-pay proration is applied to flagged earnings. Line items keep the
    catalog order. Proration always divides by 30 days whatever the month
    length, and deductions are never prorated.
    """
    member_ids = set(structure.component_ids)
    structure_components = [c for c in catalog if c.id in member_ids]
    calculated_amounts: Dict[str, Decimal] = {}

    # First pass: full monthly amounts, no LOP
    for component in structure_components:
        if component.id in calculated_amounts:
            continue
        calculated_amounts[component.id] = component_resolver.calculate_component_amount(
            component, employee.ctc, catalog, calculated_amounts
        )

    payable_days = DAYS_IN_MONTH - employee.lop_count

    # Second pass: apply LOP and categorize
    earnings: List[LineItem] = []
    deductions: List[LineItem] = []
    for component in structure_components:
        amount = calculated_amounts.get(component.id, Decimal('0'))

        if component.apply_lop_deduction and component.is_earning and employee.lop_count > 0:
            amount = amount * payable_days / DAYS_IN_MONTH

        item = LineItem(name=component.name, amount=round_money(amount))
        if component.component_type == EARNINGS:
            earnings.append(item)
        else:
            deductions.append(item)

    total_earnings = round_money(sum((e.amount for e in earnings), Decimal('0')))
    total_deductions = round_money(sum((d.amount for d in deductions), Decimal('0')))

    logger.debug(
        "Breakdown for %s: earnings=%s deductions=%s lop=%s",
        employee.id, total_earnings, total_deductions, employee.lop_count
    )

    return EmployeeSalaryBreakdown(
        employee_id=employee.id,
        employee_code=employee.employee_id,
        employee_name=employee.name,
        structure_name=structure.name,
        earnings=tuple(earnings),
        deductions=tuple(deductions),
        total_earnings=total_earnings,
        total_deductions=total_deductions,
        gross_pay=total_earnings,
        net_pay=total_earnings - total_deductions,
        lop_days=employee.lop_count,
        working_days=working_days,
        payable_days=payable_days,
    )
