from flask import Flask, request, jsonify, send_file
from pathlib import Path
import logging
import os

from ctc_payroll.database.db import init_db, SessionLocal
from ctc_payroll.database.repository import PayrollRepository
from ctc_payroll.processors.payroll_runner import PayrollRunner, normalize_working_days
from ctc_payroll.processors.payslip_generator import PayslipGenerator
from ctc_payroll.processors.payroll_register_generator import PayrollRegisterGenerator
from ctc_payroll.utils.serializers import (
    component_from_dict, component_to_dict,
    structure_from_dict, structure_to_dict,
    employee_from_dict, employee_to_dict,
    breakdown_to_dict, payroll_run_to_dict
)
from ctc_payroll.utils.validators import (
    validate_component, validate_structure, validate_employee, find_reference_problems
)
from config.settings import (
    OUTPUT_DIR, SECRET_KEY, DEBUG, LOG_LEVEL, STRICT_REFERENCES, DEFAULT_WORKING_DAYS
)

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['SECRET_KEY'] = SECRET_KEY
app.config['DEBUG'] = DEBUG

EXPORT_DIRS = [OUTPUT_DIR / 'payslips', OUTPUT_DIR / 'registers']
for directory in EXPORT_DIRS:
    directory.mkdir(parents=True, exist_ok=True)

init_db()


def validation_error(errors):
    return jsonify({'success': False, 'errors': errors}), 400


def not_found(what):
    return jsonify({'success': False, 'message': f'{what} not found'}), 404


def load_runner(repo):
    """Run the engine over a fresh snapshot of the catalog"""
    catalog = repo.get_components()
    if STRICT_REFERENCES:
        problems = find_reference_problems(catalog)
        if problems:
            raise ValueError('; '.join(problems))
    runner = PayrollRunner(catalog, repo.get_structures(), DEFAULT_WORKING_DAYS)
    return runner, repo.get_employees()

# ============================================================================
# Catalog Endpoints
# ============================================================================

@app.route('/api/components')
def get_components():
    """Get the component catalog"""
    db = SessionLocal()
    try:
        repo = PayrollRepository(db)
        return jsonify([component_to_dict(c) for c in repo.get_components()])
    finally:
        db.close()

@app.route('/api/components', methods=['POST'])
def save_component():
    """Create or update a component"""
    try:
        component = component_from_dict(request.get_json(silent=True) or {})
    except (KeyError, ValueError, ArithmeticError) as e:
        return validation_error([str(e)])

    errors = validate_component(component)
    if errors:
        return validation_error(errors)

    db = SessionLocal()
    try:
        PayrollRepository(db).save_component(component)
        return jsonify({'success': True, 'component': component_to_dict(component)})
    except Exception as e:
        logger.exception("Saving component failed")
        return jsonify({'success': False, 'message': str(e)}), 500
    finally:
        db.close()

@app.route('/api/components/<component_id>', methods=['DELETE'])
def delete_component(component_id):
    db = SessionLocal()
    try:
        if not PayrollRepository(db).delete_component(component_id):
            return not_found('Component')
        return jsonify({'success': True, 'message': 'Component deleted'})
    finally:
        db.close()

@app.route('/api/structures')
def get_structures():
    db = SessionLocal()
    try:
        repo = PayrollRepository(db)
        return jsonify([structure_to_dict(s) for s in repo.get_structures()])
    finally:
        db.close()

@app.route('/api/structures', methods=['POST'])
def save_structure():
    """Create or update a salary structure"""
    try:
        structure = structure_from_dict(request.get_json(silent=True) or {})
    except (KeyError, ValueError, ArithmeticError) as e:
        return validation_error([str(e)])

    errors = validate_structure(structure)
    if errors:
        return validation_error(errors)

    db = SessionLocal()
    try:
        PayrollRepository(db).save_structure(structure)
        return jsonify({'success': True, 'structure': structure_to_dict(structure)})
    except Exception as e:
        logger.exception("Saving structure failed")
        return jsonify({'success': False, 'message': str(e)}), 500
    finally:
        db.close()

@app.route('/api/structures/<structure_id>', methods=['DELETE'])
def delete_structure(structure_id):
    db = SessionLocal()
    try:
        if not PayrollRepository(db).delete_structure(structure_id):
            return not_found('Structure')
        return jsonify({'success': True, 'message': 'Structure deleted'})
    finally:
        db.close()

@app.route('/api/employees')
def get_employees():
    """Get list of employees"""
    db = SessionLocal()
    try:
        repo = PayrollRepository(db)
        return jsonify([employee_to_dict(e) for e in repo.get_employees()])
    finally:
        db.close()

@app.route('/api/employees', methods=['POST'])
def save_employee():
    """Create or update an employee"""
    try:
        employee = employee_from_dict(request.get_json(silent=True) or {})
    except (KeyError, ValueError, ArithmeticError) as e:
        return validation_error([str(e)])

    errors = validate_employee(employee)
    if errors:
        return validation_error(errors)

    db = SessionLocal()
    try:
        PayrollRepository(db).save_employee(employee)
        return jsonify({'success': True, 'employee': employee_to_dict(employee)})
    except Exception as e:
        logger.exception("Saving employee failed")
        return jsonify({'success': False, 'message': str(e)}), 500
    finally:
        db.close()

@app.route('/api/employees/<employee_id>', methods=['DELETE'])
def delete_employee(employee_id):
    db = SessionLocal()
    try:
        if not PayrollRepository(db).delete_employee(employee_id):
            return not_found('Employee')
        return jsonify({'success': True, 'message': 'Employee deleted'})
    finally:
        db.close()

# ============================================================================
# Payroll Endpoints
# ============================================================================

@app.route('/api/payroll/calculate', methods=['POST'])
def calculate_payroll():
    """Calculate breakdowns for all eligible employees without saving"""
    data = request.get_json(silent=True) or {}
    working_days = normalize_working_days(data.get('working_days'), DEFAULT_WORKING_DAYS)

    db = SessionLocal()
    try:
        runner, employees = load_runner(PayrollRepository(db))
        breakdowns = runner.calculate(employees, working_days)
        return jsonify({
            'success': True,
            'message': f'Payroll calculated for {len(breakdowns)} employees',
            'breakdowns': [breakdown_to_dict(b) for b in breakdowns]
        })
    except Exception as e:
        return jsonify({
            'success': False,
            'message': str(e)
        }), 500
    finally:
        db.close()

@app.route('/api/payroll/runs', methods=['POST'])
def save_payroll_run():
    """Calculate and save a payroll run"""
    data = request.get_json(silent=True) or {}
    working_days = normalize_working_days(data.get('working_days'), DEFAULT_WORKING_DAYS)

    db = SessionLocal()
    try:
        repo = PayrollRepository(db)
        runner, employees = load_runner(repo)
        payroll_run = runner.run(employees, working_days)
        repo.save_payroll_run(payroll_run)
        return jsonify({
            'success': True,
            'message': 'Payroll saved successfully',
            'run': payroll_run_to_dict(payroll_run)
        })
    except Exception as e:
        return jsonify({
            'success': False,
            'message': str(e)
        }), 500
    finally:
        db.close()

@app.route('/api/payroll/runs')
def get_payroll_runs():
    """Get all saved payroll runs"""
    db = SessionLocal()
    try:
        runs = PayrollRepository(db).get_payroll_runs()
        return jsonify([payroll_run_to_dict(r) for r in runs])
    finally:
        db.close()

@app.route('/api/payroll/runs/<run_id>')
def get_payroll_run(run_id):
    db = SessionLocal()
    try:
        payroll_run = PayrollRepository(db).get_payroll_run(run_id)
        if payroll_run is None:
            return not_found('Payroll run')
        return jsonify(payroll_run_to_dict(payroll_run))
    finally:
        db.close()

@app.route('/api/payroll/runs/<run_id>/export', methods=['POST'])
def export_payroll_run(run_id):
    """Generate the payroll register and payslips for a saved run"""
    data = request.get_json(silent=True) or {}
    period = data.get('period', '')

    db = SessionLocal()
    try:
        payroll_run = PayrollRepository(db).get_payroll_run(run_id)
        if payroll_run is None:
            return not_found('Payroll run')

        register = PayrollRegisterGenerator().generate(payroll_run)
        payslip_gen = PayslipGenerator()
        payslips = [Path(payslip_gen.generate(b, period)).name for b in payroll_run.breakdowns]

        return jsonify({
            'success': True,
            'message': f'Generated register and {len(payslips)} payslips',
            'register': Path(register).name,
            'payslips': payslips
        })
    except Exception as e:
        return jsonify({
            'success': False,
            'message': str(e)
        }), 500
    finally:
        db.close()

@app.route('/api/download/<path:filename>')
def download_file(filename):
    """Download a generated file"""
    for directory in EXPORT_DIRS:
        filepath = directory / Path(filename).name
        if filepath.exists():
            return send_file(filepath, as_attachment=True)

    return jsonify({'error': 'File not found'}), 404

if __name__ == '__main__':
    port = int(os.getenv('PORT', 5000))
    app.run(host='0.0.0.0', port=port, debug=DEBUG)
