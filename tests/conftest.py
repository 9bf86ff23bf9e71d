import os
import tempfile
from decimal import Decimal

# Keep test runs away from the real database and output folders
_TMP_DIR = tempfile.mkdtemp(prefix="ctc_payroll_tests_")
os.environ["DATA_DIR"] = _TMP_DIR
os.environ["OUTPUT_DIR"] = os.path.join(_TMP_DIR, "output")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'payroll.db')}"
os.environ["CURRENCY_SYMBOL"] = "₹"
os.environ["STRICT_REFERENCES"] = "False"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from ctc_payroll.database.db import init_db
from ctc_payroll.models.employee import Employee
from ctc_payroll.models.payroll import (
    CTC, DEDUCTIONS, EARNINGS, FIXED, FORMULA, PERCENTAGE,
    ComponentTerm, OperatorTerm, PayrollComponent, SalaryStructure
)


@pytest.fixture
def catalog():
    """Typical structure: CTC 12,00,000 gives a monthly base of 1,00,000"""
    return [
        PayrollComponent(
            id="basic", name="Basic", component_type=EARNINGS,
            component_category=PERCENTAGE, amount=50, based_on=CTC,
            apply_lop_deduction=True,
        ),
        PayrollComponent(
            id="hra", name="HRA", component_type=EARNINGS,
            component_category=PERCENTAGE, amount=40, based_on="basic",
            apply_lop_deduction=True,
        ),
        PayrollComponent(
            id="special", name="Special Allowance", component_type=EARNINGS,
            component_category=FORMULA, apply_lop_deduction=True,
            formula_terms=(
                ComponentTerm(CTC), OperatorTerm('-'),
                ComponentTerm("basic"), OperatorTerm('-'),
                ComponentTerm("hra"),
            ),
        ),
        PayrollComponent(
            id="pf", name="Provident Fund", component_type=DEDUCTIONS,
            component_category=PERCENTAGE, amount=12, based_on="basic",
            apply_lop_deduction=True,
        ),
        PayrollComponent(
            id="pt", name="Professional Tax", component_type=DEDUCTIONS,
            component_category=FIXED, amount=200,
        ),
    ]


@pytest.fixture
def structure():
    return SalaryStructure(id="std", name="Standard", component_ids=("pt", "pf", "special", "hra", "basic"))


@pytest.fixture
def employee():
    return Employee(
        id="e1", employee_id="EMP001", name="Asha Rao",
        ctc=Decimal("1200000"), lop_count=0, salary_structure_id="std",
    )


@pytest.fixture
def db_session():
    """Session on a private in-memory database"""
    engine = create_engine("sqlite://")
    init_db(bind=engine)
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()
    engine.dispose()
