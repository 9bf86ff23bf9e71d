from decimal import Decimal

from ctc_payroll.models.payroll import (
    CTC, EARNINGS, FIXED, ComponentTerm, OperatorTerm, PayrollComponent, PercentageTerm
)
from ctc_payroll.processors.formula_evaluator import evaluate_formula

CTC_AMOUNT = Decimal("1200000")


def fixed(component_id, amount):
    return PayrollComponent(id=component_id, name=component_id, component_type=EARNINGS,
                            component_category=FIXED, amount=amount)


CATALOG = [fixed("a", 100), fixed("b", 50), fixed("two", 2), fixed("zero", 0)]

A, B, TWO, ZERO = (ComponentTerm(i) for i in ("a", "b", "two", "zero"))
PLUS, MINUS, TIMES, DIVIDE = (OperatorTerm(o) for o in "+-*/")


def evaluate(*terms, cache=None):
    return evaluate_formula(terms, CTC_AMOUNT, CATALOG, {} if cache is None else cache)


def test_empty_formula_is_zero():
    assert evaluate() == Decimal("0")


def test_single_operand():
    assert evaluate(A) == Decimal("100")


def test_multiplication_before_subtraction():
    assert evaluate(A, TIMES, TWO, MINUS, B) == Decimal("150")


def test_multiplication_after_addition_still_binds_first():
    assert evaluate(B, PLUS, A, TIMES, TWO) == Decimal("250")


def test_consecutive_high_precedence_operators_chain_left_to_right():
    assert evaluate(A, DIVIDE, TWO, TIMES, TWO) == Decimal("100")
    assert evaluate(A, MINUS, B, TIMES, TWO, DIVIDE, TWO) == Decimal("50")


def test_addition_and_subtraction_fold_left():
    assert evaluate(A, MINUS, B, MINUS, TWO) == Decimal("48")


def test_division_by_zero_is_zero():
    assert evaluate(A, DIVIDE, ZERO) == Decimal("0")
    assert evaluate(B, PLUS, A, DIVIDE, ZERO) == Decimal("50")


def test_ctc_reference_is_monthly_ctc():
    assert evaluate(ComponentTerm(CTC), MINUS, A) == Decimal("99900")


def test_percentage_terms():
    assert evaluate(PercentageTerm(Decimal("10"), CTC)) == Decimal("10000")
    assert evaluate(PercentageTerm(Decimal("60"), "a"), PLUS, B) == Decimal("110")


def test_unknown_component_counts_as_zero():
    assert evaluate(A, PLUS, ComponentTerm("gone")) == Decimal("100")
    assert evaluate(A, TIMES, PercentageTerm(Decimal("50"), "gone")) == Decimal("0")


def test_resolved_references_are_cached():
    cache = {}
    evaluate(A, PLUS, B, cache=cache)
    assert cache == {"a": Decimal("100"), "b": Decimal("50")}


def test_cached_value_is_used():
    assert evaluate(A, PLUS, B, cache={"a": Decimal("1")}) == Decimal("51")


def test_trailing_operator_reads_missing_operand_as_zero():
    assert evaluate(A, PLUS) == Decimal("100")
    assert evaluate(A, TIMES) == Decimal("0")


def test_leading_operator_is_evaluated_mechanically():
    # operands [100], operators [+]: 100 + missing(0)
    assert evaluate(PLUS, A) == Decimal("100")


def test_double_operator_is_evaluated_mechanically():
    # 100 * 50 collapses first, then the second * finds no right operand
    assert evaluate(A, TIMES, TIMES, B) == Decimal("0")
    # operands [100, 50], operators [+, -]: 100 + 50 - missing(0)
    assert evaluate(A, PLUS, MINUS, B) == Decimal("150")
