import pytest

import app as payroll_app
from ctc_payroll.database.db import Base, engine

COMPONENTS = [
    {'id': 'basic', 'name': 'Basic', 'componentType': 'earnings', 'componentCategory': 'percentage',
     'amount': 50, 'basedOn': 'ctc', 'applyLopDeduction': True},
    {'id': 'hra', 'name': 'HRA', 'componentType': 'earnings', 'componentCategory': 'percentage',
     'amount': 40, 'basedOn': 'basic', 'applyLopDeduction': True},
    {'id': 'special', 'name': 'Special Allowance', 'componentType': 'earnings',
     'componentCategory': 'formula', 'applyLopDeduction': True,
     'formulaTerms': [
         {'type': 'component', 'value': 'ctc'}, {'type': 'operator', 'value': '-'},
         {'type': 'component', 'value': 'basic'}, {'type': 'operator', 'value': '-'},
         {'type': 'component', 'value': 'hra'},
     ]},
    {'id': 'pf', 'name': 'Provident Fund', 'componentType': 'deductions',
     'componentCategory': 'formula',
     'formulaTerms': [{'type': 'percentage', 'value': '12%basic'}]},
    {'id': 'pt', 'name': 'Professional Tax', 'componentType': 'deductions',
     'componentCategory': 'fixed', 'amount': 200},
]


@pytest.fixture
def client():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    payroll_app.app.config['TESTING'] = True
    with payroll_app.app.test_client() as client:
        yield client


@pytest.fixture
def seeded(client):
    for component in COMPONENTS:
        assert client.post('/api/components', json=component).status_code == 200
    client.post('/api/structures', json={
        'id': 'std', 'name': 'Standard', 'componentIds': ['basic', 'hra', 'special', 'pf', 'pt'],
    })
    client.post('/api/employees', json={
        'id': 'e1', 'employeeId': 'EMP001', 'name': 'Asha Rao', 'ctc': 1200000,
        'lopCount': 0, 'salaryStructureId': 'std',
    })
    return client


def test_catalog_is_listed_in_order(seeded):
    components = seeded.get('/api/components').get_json()

    assert [c['id'] for c in components] == ['basic', 'hra', 'special', 'pf', 'pt']
    assert components[3]['formulaTerms'] == [{'type': 'percentage', 'value': '12%basic'}]


def test_invalid_component_is_rejected(client):
    response = client.post('/api/components', json={
        'id': 'x', 'name': 'X', 'componentType': 'earnings', 'componentCategory': 'formula',
        'formulaTerms': [{'type': 'component', 'value': 'basic'}, {'type': 'operator', 'value': '+'}],
    })

    assert response.status_code == 400
    assert response.get_json()['errors'] == ["Formula must alternate operands and operators"]


def test_malformed_percentage_term_is_rejected(client):
    response = client.post('/api/components', json={
        'id': 'x', 'name': 'X', 'componentType': 'earnings', 'componentCategory': 'formula',
        'formulaTerms': [{'type': 'percentage', 'value': 'basic'}],
    })
    assert response.status_code == 400


def test_invalid_employee_is_rejected(client):
    response = client.post('/api/employees', json={'id': 'e', 'employeeId': 'E', 'name': 'E', 'ctc': 0})
    assert response.status_code == 400


def test_calculate_payroll(seeded):
    data = seeded.post('/api/payroll/calculate', json={'working_days': 26}).get_json()

    assert data['success'] is True
    breakdown = data['breakdowns'][0]
    assert breakdown['netPay'] == 93800.0
    assert breakdown['workingDays'] == 26
    assert [e['name'] for e in breakdown['earnings']] == ['Basic', 'HRA', 'Special Allowance']


def test_calculate_without_eligible_employees_fails(client):
    response = client.post('/api/payroll/calculate', json={})

    assert response.status_code == 500
    assert response.get_json()['message'] == "No employees with salary structures assigned"


def test_saved_run_can_be_listed_fetched_and_exported(seeded):
    run = seeded.post('/api/payroll/runs', json={}).get_json()['run']

    assert run['totalPayroll'] == 93800.0
    assert [r['id'] for r in seeded.get('/api/payroll/runs').get_json()] == [run['id']]
    assert seeded.get(f"/api/payroll/runs/{run['id']}").get_json()['totalPayroll'] == 93800.0

    exported = seeded.post(f"/api/payroll/runs/{run['id']}/export", json={'period': '2025-08'}).get_json()
    assert exported['payslips'] == ['EMP001_2025-08_payslip.xlsx']

    download = seeded.get(f"/api/download/{exported['register']}")
    assert download.status_code == 200
    download.close()


def test_missing_records_are_404(client):
    assert client.get('/api/payroll/runs/nope').status_code == 404
    assert client.post('/api/payroll/runs/nope/export', json={}).status_code == 404
    assert client.delete('/api/components/nope').status_code == 404
    assert client.get('/api/download/nothing.xlsx').status_code == 404


def test_deleted_structure_skips_employee(seeded):
    seeded.post('/api/employees', json={
        'id': 'e2', 'employeeId': 'EMP002', 'name': 'Ravi Kumar', 'ctc': 600000,
        'salaryStructureId': 'std',
    })
    assert seeded.delete('/api/structures/std').status_code == 200

    response = seeded.post('/api/payroll/calculate', json={})

    assert response.status_code == 200
    assert response.get_json()['breakdowns'] == []


def test_formula_term_that_is_not_an_object_is_rejected(client):
    response = client.post('/api/components', json={
        'id': 'x', 'name': 'X', 'componentType': 'earnings', 'componentCategory': 'formula',
        'formulaTerms': ['x'],
    })

    assert response.status_code == 400
    assert response.get_json()['success'] is False
