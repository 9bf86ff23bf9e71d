"""Resolve the monthly value of a single payroll component.

Components reference each other by id, either through ``based_on``
(percentage components) or through formula terms. Values are memoized in a
per-run cache so every component is evaluated at most once per breakdown.
"""
import logging
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from ..models.payroll import CTC, FIXED, FORMULA, PayrollComponent

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


class CircularReferenceError(ValueError):
    """Raised when components reference each other in a loop"""

    def __init__(self, chain):
        self.chain = list(chain)
        super().__init__(f"Circular component reference: {' -> '.join(self.chain)}")


def monthly_ctc(ctc: Decimal) -> Decimal:
    """Convert annual CTC to the monthly base"""
    return Decimal(ctc) / MONTHS_PER_YEAR


def find_component(catalog: Sequence[PayrollComponent], component_id: str) -> Optional[PayrollComponent]:
    """Find a component in the catalog by id"""
    return next((c for c in catalog if c.id == component_id), None)


def calculate_component_amount(
    component: PayrollComponent,
    ctc: Decimal,
    catalog: Sequence[PayrollComponent],
    cache: Dict[str, Decimal],
    resolving: Optional[List[str]] = None,
) -> Decimal:
    """Calculate the pre-proration monthly amount of a component.

    ``resolving`` is the stack of component ids being evaluated above this
    call; meeting one of them again means the reference graph has a cycle.
    """
    if resolving is None:
        resolving = []

    if component.component_category == FIXED:
        return component.amount

    if component.id in resolving:
        chain = resolving[resolving.index(component.id):] + [component.id]
        raise CircularReferenceError(chain)

    resolving.append(component.id)
    try:
        if component.component_category == FORMULA:
            from .formula_evaluator import evaluate_formula
            return evaluate_formula(component.formula_terms, ctc, catalog, cache, resolving)

        # Percentage of CTC or of another component
        if component.based_on == CTC:
            base_amount = monthly_ctc(ctc)
        elif component.based_on in cache:
            base_amount = cache[component.based_on]
        else:
            base_component = find_component(catalog, component.based_on)
            if base_component is not None:
                base_amount = calculate_component_amount(base_component, ctc, catalog, cache, resolving)
                cache[base_component.id] = base_amount
            else:
                logger.debug(
                    "Component %s is based on unknown component %s, using monthly CTC",
                    component.id, component.based_on
                )
                base_amount = monthly_ctc(ctc)

        return (base_amount * component.amount) / 100
    finally:
        resolving.pop()


def resolve_reference(
    component_id: str,
    ctc: Decimal,
    catalog: Sequence[PayrollComponent],
    cache: Dict[str, Decimal],
    resolving: Optional[List[str]] = None,
) -> Decimal:
    """Value behind a formula reference.

    ``ctc`` means the monthly CTC, cached components are reused, anything else
    is resolved and cached. Unknown component ids count as zero.
    """
    if component_id == CTC:
        return monthly_ctc(ctc)
    if component_id in cache:
        return cache[component_id]

    component = find_component(catalog, component_id)
    if component is None:
        logger.debug("Formula references unknown component %s, using 0", component_id)
        return Decimal('0')

    amount = calculate_component_amount(component, ctc, catalog, cache, resolving)
    cache[component.id] = amount
    return amount
