"""Monthly salary breakdowns from CTC and configurable payroll components."""
from .processors.component_resolver import CircularReferenceError, calculate_component_amount
from .processors.breakdown_calculator import calculate_employee_breakdown
from .utils.formatters import format_currency

__version__ = "0.1.0"

__all__ = [
    'CircularReferenceError',
    'calculate_component_amount',
    'calculate_employee_breakdown',
    'format_currency'
]
