from .component_resolver import CircularReferenceError, calculate_component_amount
from .formula_evaluator import evaluate_formula
from .breakdown_calculator import calculate_employee_breakdown
from .payroll_runner import PayrollRunner, run_payroll

# The Excel generators read config.settings (output folders); import them
# from their own modules.

__all__ = [
    'CircularReferenceError',
    'calculate_component_amount',
    'evaluate_formula',
    'calculate_employee_breakdown',
    'PayrollRunner',
    'run_payroll'
]
