"""Convert payroll records to and from plain dicts (JSON / database text).

Formula terms keep the stored shape ``{"type": ..., "value": ...}``. A
percentage term packs its magnitude and the referenced id into one value,
``"60%basic"``; that packing only exists here.
"""
import re
from decimal import Decimal
from typing import Any, Dict, List

from ..models.employee import Employee
from ..models.payroll import (
    COMPONENT_CATEGORIES, COMPONENT_TYPES, CTC, OPERATORS,
    ComponentTerm, EmployeeSalaryBreakdown, FormulaTerm, LineItem,
    OperatorTerm, PayrollComponent, PayrollRun, PercentageTerm, SalaryStructure
)

PERCENTAGE_VALUE = re.compile(r'^(\d+(?:\.\d+)?)%(.+)$')


def _decimal(value) -> Decimal:
    return Decimal(str(value if value is not None else 0))


def _number(value: Decimal):
    # JSON has no decimal type
    return float(value)


# ========== Formula Terms ==========

def term_from_dict(data: Dict[str, Any]) -> FormulaTerm:
    if not isinstance(data, dict):
        raise ValueError(f"Formula term must be an object: {data!r}")
    term_type = data.get('type')
    value = str(data.get('value', ''))

    if term_type == 'operator':
        if value not in OPERATORS:
            raise ValueError(f"Unknown formula operator: {value!r}")
        return OperatorTerm(value)
    if term_type == 'component':
        return ComponentTerm(value)
    if term_type == 'percentage':
        match = PERCENTAGE_VALUE.match(value)
        if not match:
            raise ValueError(f"Invalid percentage term: {value!r}")
        return PercentageTerm(Decimal(match.group(1)), match.group(2))
    raise ValueError(f"Unknown formula term type: {term_type!r}")


def term_to_dict(term: FormulaTerm) -> Dict[str, str]:
    if isinstance(term, OperatorTerm):
        return {'type': 'operator', 'value': term.operator}
    if isinstance(term, ComponentTerm):
        return {'type': 'component', 'value': term.component_id}
    if isinstance(term, PercentageTerm):
        return {'type': 'percentage', 'value': f"{term.percentage.normalize():f}%{term.component_id}"}
    raise TypeError(f"Unsupported formula term: {term!r}")


# ========== Components / Structures / Employees ==========

def component_from_dict(data: Dict[str, Any]) -> PayrollComponent:
    component_type = data.get('componentType', data.get('component_type'))
    category = data.get('componentCategory', data.get('component_category'))
    if component_type not in COMPONENT_TYPES:
        raise ValueError(f"Unknown component type: {component_type!r}")
    if category not in COMPONENT_CATEGORIES:
        raise ValueError(f"Unknown component category: {category!r}")

    terms = data.get('formulaTerms', data.get('formula_terms')) or []
    return PayrollComponent(
        id=str(data['id']),
        name=data.get('name', ''),
        component_type=component_type,
        component_category=category,
        amount=_decimal(data.get('amount')),
        based_on=data.get('basedOn', data.get('based_on')) or CTC,
        apply_lop_deduction=bool(data.get('applyLopDeduction', data.get('apply_lop_deduction', False))),
        formula_terms=tuple(term_from_dict(t) for t in terms),
    )


def component_to_dict(component: PayrollComponent) -> Dict[str, Any]:
    return {
        'id': component.id,
        'name': component.name,
        'componentType': component.component_type,
        'componentCategory': component.component_category,
        'amount': _number(component.amount),
        'basedOn': component.based_on,
        'applyLopDeduction': component.apply_lop_deduction,
        'formulaTerms': [term_to_dict(t) for t in component.formula_terms],
    }


def structure_from_dict(data: Dict[str, Any]) -> SalaryStructure:
    return SalaryStructure(
        id=str(data['id']),
        name=data.get('name', ''),
        component_ids=tuple(data.get('componentIds', data.get('component_ids')) or ()),
    )


def structure_to_dict(structure: SalaryStructure) -> Dict[str, Any]:
    return {
        'id': structure.id,
        'name': structure.name,
        'componentIds': list(structure.component_ids),
    }


def employee_from_dict(data: Dict[str, Any]) -> Employee:
    return Employee(
        id=str(data['id']),
        employee_id=data.get('employeeId', data.get('employee_id', '')),
        name=data.get('name', ''),
        ctc=_decimal(data.get('ctc')),
        lop_count=int(data.get('lopCount', data.get('lop_count')) or 0),
        salary_structure_id=data.get('salaryStructureId', data.get('salary_structure_id')) or None,
    )


def employee_to_dict(employee: Employee) -> Dict[str, Any]:
    return {
        'id': employee.id,
        'employeeId': employee.employee_id,
        'name': employee.name,
        'ctc': _number(employee.ctc),
        'lopCount': employee.lop_count,
        'salaryStructureId': employee.salary_structure_id,
    }


# ========== Breakdowns / Runs ==========

def _items_to_list(items) -> List[Dict[str, Any]]:
    return [{'name': i.name, 'amount': _number(i.amount)} for i in items]


def _items_from_list(items) -> tuple:
    return tuple(LineItem(name=i['name'], amount=_decimal(i['amount'])) for i in items or [])


def breakdown_to_dict(breakdown: EmployeeSalaryBreakdown) -> Dict[str, Any]:
    return {
        'employeeId': breakdown.employee_id,
        'employeeCode': breakdown.employee_code,
        'employeeName': breakdown.employee_name,
        'structureName': breakdown.structure_name,
        'earnings': _items_to_list(breakdown.earnings),
        'deductions': _items_to_list(breakdown.deductions),
        'totalEarnings': _number(breakdown.total_earnings),
        'totalDeductions': _number(breakdown.total_deductions),
        'grossPay': _number(breakdown.gross_pay),
        'netPay': _number(breakdown.net_pay),
        'lopDays': breakdown.lop_days,
        'workingDays': breakdown.working_days,
        'payableDays': breakdown.payable_days,
    }


def breakdown_from_dict(data: Dict[str, Any]) -> EmployeeSalaryBreakdown:
    return EmployeeSalaryBreakdown(
        employee_id=data['employeeId'],
        employee_code=data.get('employeeCode', ''),
        employee_name=data['employeeName'],
        structure_name=data['structureName'],
        earnings=_items_from_list(data.get('earnings')),
        deductions=_items_from_list(data.get('deductions')),
        total_earnings=_decimal(data['totalEarnings']),
        total_deductions=_decimal(data['totalDeductions']),
        gross_pay=_decimal(data['grossPay']),
        net_pay=_decimal(data['netPay']),
        lop_days=int(data['lopDays']),
        working_days=int(data['workingDays']),
        payable_days=int(data['payableDays']),
    )


def payroll_run_to_dict(run: PayrollRun) -> Dict[str, Any]:
    return {
        'id': run.id,
        'date': run.date,
        'workingDays': run.working_days,
        'breakdowns': [breakdown_to_dict(b) for b in run.breakdowns],
        'totalPayroll': _number(run.total_payroll),
    }
