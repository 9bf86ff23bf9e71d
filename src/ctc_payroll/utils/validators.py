from decimal import Decimal
from typing import Dict, List, Sequence

from ..models.employee import Employee
from ..models.payroll import (
    CTC, DAYS_IN_MONTH, FIXED, FORMULA, PERCENTAGE,
    ComponentTerm, FormulaTerm, OperatorTerm, PayrollComponent,
    PercentageTerm, SalaryStructure
)

def validate_lop_count(lop_count: int) -> bool:
    """LOP days must fit in the 30-day proration basis"""
    return 0 <= lop_count <= DAYS_IN_MONTH

def validate_ctc(ctc: Decimal) -> bool:
    return Decimal(str(ctc)) > 0

def validate_percentage(rate: Decimal) -> bool:
    return Decimal(str(rate)) >= 0

def validate_formula_terms(terms: Sequence[FormulaTerm]) -> bool:
    """Non-empty, starts and ends with an operand, operands and operators alternate"""
    if not terms:
        return False
    for index, term in enumerate(terms):
        expect_operator = index % 2 == 1
        if isinstance(term, OperatorTerm) != expect_operator:
            return False
    return not isinstance(terms[-1], OperatorTerm)

def validate_component(component: PayrollComponent) -> List[str]:
    """Required-field checks for a component, empty list when valid"""
    errors = []
    if not component.name or not component.name.strip():
        errors.append("Component name is required")
    if component.component_category in (FIXED, PERCENTAGE) and not validate_percentage(component.amount):
        errors.append("Amount must not be negative")
    if component.component_category == PERCENTAGE and not component.based_on:
        errors.append("Percentage components need a base")
    if component.component_category == FORMULA:
        if not component.formula_terms:
            errors.append("Formula must contain at least one term")
        elif not validate_formula_terms(component.formula_terms):
            errors.append("Formula must alternate operands and operators")
    return errors

def validate_employee(employee: Employee) -> List[str]:
    errors = []
    if not employee.name or not employee.name.strip():
        errors.append("Employee name is required")
    if not employee.employee_id:
        errors.append("Employee ID is required")
    if not validate_ctc(employee.ctc):
        errors.append("CTC must be greater than zero")
    if not validate_lop_count(employee.lop_count):
        errors.append(f"LOP days must be between 0 and {DAYS_IN_MONTH}")
    return errors

def validate_structure(structure: SalaryStructure) -> List[str]:
    errors = []
    if not structure.name or not structure.name.strip():
        errors.append("Structure name is required")
    if not structure.component_ids:
        errors.append("Select at least one component")
    return errors

def component_references(component: PayrollComponent) -> List[str]:
    """Ids a component depends on (``ctc`` excluded)"""
    if component.component_category == FORMULA:
        refs = [
            t.component_id for t in component.formula_terms
            if isinstance(t, (ComponentTerm, PercentageTerm))
        ]
    elif component.component_category == FIXED:
        refs = []
    else:
        refs = [component.based_on]
    return [r for r in refs if r != CTC]

def find_reference_problems(catalog: Sequence[PayrollComponent]) -> List[str]:
    """Strict check of the reference graph: dangling ids and cycles"""
    graph: Dict[str, List[str]] = {c.id: component_references(c) for c in catalog}
    names = {c.id: c.name for c in catalog}
    problems = []

    for component in catalog:
        for ref in graph[component.id]:
            if ref not in graph:
                problems.append(f"{component.name} references unknown component {ref}")

    # depth-first search, colouring nodes white/grey/black
    state: Dict[str, int] = {}
    reported = set()

    def visit(node_id: str, path: List[str]):
        state[node_id] = 1
        path.append(node_id)
        for ref in graph.get(node_id, []):
            if ref not in graph:
                continue
            if state.get(ref) == 1:
                cycle = path[path.index(ref):] + [ref]
                key = frozenset(cycle)
                if key not in reported:
                    reported.add(key)
                    problems.append(
                        "Circular component reference: " + " -> ".join(names[c] for c in cycle)
                    )
            elif ref not in state:
                visit(ref, path)
        path.pop()
        state[node_id] = 2

    for component in catalog:
        if component.id not in state:
            visit(component.id, [])

    return problems
