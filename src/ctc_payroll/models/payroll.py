from dataclasses import dataclass, field
from decimal import Decimal
from typing import Tuple, Union

# Component types
EARNINGS = 'earnings'
DEDUCTIONS = 'deductions'
COMPONENT_TYPES = (EARNINGS, DEDUCTIONS)

# Component categories
FIXED = 'fixed'
PERCENTAGE = 'percentage'
FORMULA = 'formula'
COMPONENT_CATEGORIES = (FIXED, PERCENTAGE, FORMULA)

# Reference to the employee's CTC instead of another component
CTC = 'ctc'

OPERATORS = ('+', '-', '*', '/')

# Proration basis, independent of the calendar month length
DAYS_IN_MONTH = 30


@dataclass(frozen=True)
class OperatorTerm:
    """Arithmetic operator inside a formula"""
    operator: str


@dataclass(frozen=True)
class ComponentTerm:
    """Full value of a component (or of the monthly CTC)"""
    component_id: str


@dataclass(frozen=True)
class PercentageTerm:
    """Percentage of a component (or of the monthly CTC)"""
    percentage: Decimal
    component_id: str


FormulaTerm = Union[OperatorTerm, ComponentTerm, PercentageTerm]


@dataclass
class PayrollComponent:
    """Salary component definition from the catalog"""
    id: str
    name: str
    component_type: str
    component_category: str
    amount: Decimal = Decimal('0')  # fixed value or percentage magnitude
    based_on: str = CTC
    apply_lop_deduction: bool = False
    formula_terms: Tuple[FormulaTerm, ...] = ()

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            self.amount = Decimal(str(self.amount))
        self.formula_terms = tuple(self.formula_terms or ())

    @property
    def is_earning(self) -> bool:
        return self.component_type == EARNINGS


@dataclass
class SalaryStructure:
    """Named set of components assigned to employees"""
    id: str
    name: str
    component_ids: Tuple[str, ...] = ()

    def __post_init__(self):
        self.component_ids = tuple(self.component_ids)


@dataclass(frozen=True)
class LineItem:
    """Single earning or deduction line on a breakdown"""
    name: str
    amount: Decimal


@dataclass(frozen=True)
class EmployeeSalaryBreakdown:
    """Monthly salary breakdown for one employee"""
    employee_id: str
    employee_code: str
    employee_name: str
    structure_name: str
    earnings: Tuple[LineItem, ...]
    deductions: Tuple[LineItem, ...]
    total_earnings: Decimal
    total_deductions: Decimal
    gross_pay: Decimal
    net_pay: Decimal
    lop_days: int
    working_days: int
    payable_days: int


@dataclass
class PayrollRun:
    """Saved payroll run covering every eligible employee"""
    id: str
    date: str
    working_days: int
    breakdowns: Tuple[EmployeeSalaryBreakdown, ...] = field(default_factory=tuple)
    total_payroll: Decimal = Decimal('0')

    @property
    def total_earnings(self) -> Decimal:
        return sum((b.total_earnings for b in self.breakdowns), Decimal('0'))

    @property
    def total_deductions(self) -> Decimal:
        return sum((b.total_deductions for b in self.breakdowns), Decimal('0'))
