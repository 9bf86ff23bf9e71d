from dataclasses import replace
from decimal import Decimal

import pytest

from ctc_payroll.database.repository import PayrollRepository
from ctc_payroll.models.employee import Employee
from ctc_payroll.models.payroll import EARNINGS, PERCENTAGE, PayrollComponent, SalaryStructure
from ctc_payroll.processors.breakdown_calculator import calculate_employee_breakdown
from ctc_payroll.processors.payroll_runner import run_payroll


@pytest.fixture
def repo(db_session):
    return PayrollRepository(db_session)


@pytest.fixture
def seeded(repo, catalog, structure, employee):
    for component in catalog:
        repo.save_component(component)
    repo.save_structure(structure)
    repo.save_employee(employee)
    return repo


def test_catalog_order_is_preserved(seeded, catalog):
    assert [c.id for c in seeded.get_components()] == [c.id for c in catalog]


def test_components_load_as_saved(seeded, catalog):
    loaded = {c.id: c for c in seeded.get_components()}

    assert loaded["special"].formula_terms == catalog[2].formula_terms
    assert loaded["hra"].based_on == "basic"
    assert loaded["basic"].amount == Decimal("50")
    assert loaded["pf"].apply_lop_deduction is True


def test_update_keeps_position(seeded, catalog):
    seeded.save_component(replace(catalog[0], name="Basic Salary"))

    components = seeded.get_components()
    assert components[0].name == "Basic Salary"
    assert len(components) == len(catalog)


def test_delete_component(seeded):
    assert seeded.delete_component("pt") is True
    assert seeded.delete_component("pt") is False
    assert seeded.get_component("pt") is None


def test_structure_and_employee_round_trip(seeded, structure, employee):
    assert seeded.get_structure("std") == structure
    loaded = seeded.get_employee("e1")
    assert loaded.employee_id == "EMP001"
    assert loaded.ctc == employee.ctc
    assert loaded.salary_structure_id == "std"


def test_catalog_loaded_from_database_gives_same_breakdown(seeded):
    payroll_run = run_payroll(seeded.get_employees(), seeded.get_structures(), seeded.get_components())
    assert payroll_run.total_payroll == Decimal("93800.00")


def test_saved_run_can_be_loaded(seeded, catalog, structure, employee):
    payroll_run = run_payroll([employee], [structure], catalog, 26)
    seeded.save_payroll_run(payroll_run)

    loaded = seeded.get_payroll_run(payroll_run.id)

    assert loaded.id == payroll_run.id
    assert loaded.working_days == 26
    assert loaded.total_payroll == payroll_run.total_payroll
    assert loaded.breakdowns == payroll_run.breakdowns
    assert [r.id for r in seeded.get_payroll_runs()] == [payroll_run.id]


def test_missing_run_is_none(repo):
    assert repo.get_payroll_run("nope") is None


def test_fractional_percentage_is_stored_exactly(repo):
    bonus = PayrollComponent(id="bonus", name="Bonus", component_type=EARNINGS,
                             component_category=PERCENTAGE, amount=Decimal("8.333333"))
    repo.save_component(bonus)
    structure = SalaryStructure(id="s", name="S", component_ids=("bonus",))
    employee = Employee(id="e", employee_id="E", name="E", ctc=Decimal("6000000"))

    loaded = repo.get_components()

    assert loaded[0].amount == Decimal("8.333333")
    breakdown = calculate_employee_breakdown(employee, structure, loaded)
    assert breakdown.net_pay == Decimal("41666.67")
