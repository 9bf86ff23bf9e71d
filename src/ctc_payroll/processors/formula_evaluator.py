"""Evaluate formula components.

A formula is a flat sequence of terms: component references, percentages of
components and the operators ``+ - * /``. There are no parentheses and no
unary minus; ``*`` and ``/`` bind tighter than ``+`` and ``-`` and everything
else is evaluated left to right.

Malformed sequences (leading/trailing operators, two operators in a row) are
not rejected. A missing operand is read as zero and the two passes below run
as usual.
"""
import logging
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from ..models.payroll import ComponentTerm, FormulaTerm, OperatorTerm, PayrollComponent, PercentageTerm

logger = logging.getLogger(__name__)

HIGH_PRECEDENCE = ('*', '/')


def evaluate_formula(
    terms: Sequence[FormulaTerm],
    ctc: Decimal,
    catalog: Sequence[PayrollComponent],
    cache: Dict[str, Decimal],
    resolving: Optional[List[str]] = None,
) -> Decimal:
    """Evaluate a formula term sequence to a monthly amount"""
    if not terms:
        return Decimal('0')

    operands, operators = _split_terms(terms, ctc, catalog, cache, resolving)

    # Pass 1: collapse * and / into their left operand
    i = 0
    while i < len(operators):
        operator = operators[i]
        if operator in HIGH_PRECEDENCE:
            result = _apply(operator, _operand(operands, i), _operand(operands, i + 1))
            operands[i:i + 2] = [result]
            del operators[i]
        else:
            i += 1

    # Pass 2: left fold of + and -
    result = operands[0] if operands else Decimal('0')
    for i, operator in enumerate(operators):
        result = _apply(operator, result, _operand(operands, i + 1))

    return result


def _split_terms(terms, ctc, catalog, cache, resolving):
    from .component_resolver import resolve_reference

    operands: List[Decimal] = []
    operators: List[str] = []
    for term in terms:
        if isinstance(term, OperatorTerm):
            operators.append(term.operator)
        elif isinstance(term, ComponentTerm):
            operands.append(resolve_reference(term.component_id, ctc, catalog, cache, resolving))
        elif isinstance(term, PercentageTerm):
            base = resolve_reference(term.component_id, ctc, catalog, cache, resolving)
            operands.append((base * term.percentage) / 100)
        else:
            raise TypeError(f"Unsupported formula term: {term!r}")
    return operands, operators


def _operand(operands: List[Decimal], index: int) -> Decimal:
    if index < len(operands):
        return operands[index]
    return Decimal('0')


def _apply(operator: str, left: Decimal, right: Decimal) -> Decimal:
    if operator == '*':
        return left * right
    if operator == '/':
        if right == 0:
            logger.debug("Division by zero in formula, using 0")
            return Decimal('0')
        return left / right
    if operator == '+':
        return left + right
    if operator == '-':
        return left - right
    raise ValueError(f"Unknown formula operator: {operator}")
