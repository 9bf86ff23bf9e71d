from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import List, Optional
from decimal import Decimal
import json
import logging
from .models import ComponentDB, SalaryStructureDB, EmployeeDB, PayrollRunDB, BreakdownDB
from ..models.employee import Employee
from ..models.payroll import PayrollComponent, SalaryStructure, PayrollRun, EmployeeSalaryBreakdown
from ..utils.serializers import (
    term_from_dict, term_to_dict, breakdown_to_dict, breakdown_from_dict
)

logger = logging.getLogger(__name__)

class PayrollRepository:
    """Repository for payroll catalog and run operations"""

    def __init__(self, db_session: Session):
        self.db = db_session

    # ========== Component Operations ==========

    def save_component(self, component: PayrollComponent) -> ComponentDB:
        """Save or update component"""
        db_component = self.db.query(ComponentDB).filter_by(id=component.id).first()
        if not db_component:
            db_component = ComponentDB(id=component.id, position=self._next_position(ComponentDB))
            self.db.add(db_component)
        db_component.name = component.name
        db_component.component_type = component.component_type
        db_component.component_category = component.component_category
        db_component.amount = str(component.amount)
        db_component.based_on = component.based_on
        db_component.apply_lop_deduction = component.apply_lop_deduction
        db_component.formula_json = json.dumps([term_to_dict(t) for t in component.formula_terms])
        self.db.commit()
        self.db.refresh(db_component)
        return db_component

    def get_component(self, component_id: str) -> Optional[PayrollComponent]:
        """Get component by ID"""
        row = self.db.query(ComponentDB).filter_by(id=component_id).first()
        return self._to_component(row) if row else None

    def get_components(self) -> List[PayrollComponent]:
        """Get the full catalog in catalog order"""
        rows = self.db.query(ComponentDB).order_by(ComponentDB.position).all()
        return [self._to_component(row) for row in rows]

    def delete_component(self, component_id: str) -> bool:
        """Delete component; references to it elsewhere are left dangling"""
        return self._delete(ComponentDB, component_id)

    # ========== Salary Structure Operations ==========

    def save_structure(self, structure: SalaryStructure) -> SalaryStructureDB:
        """Save or update salary structure"""
        db_structure = self.db.query(SalaryStructureDB).filter_by(id=structure.id).first()
        if not db_structure:
            db_structure = SalaryStructureDB(id=structure.id, position=self._next_position(SalaryStructureDB))
            self.db.add(db_structure)
        db_structure.name = structure.name
        db_structure.component_ids_json = json.dumps(list(structure.component_ids))
        self.db.commit()
        self.db.refresh(db_structure)
        return db_structure

    def get_structure(self, structure_id: str) -> Optional[SalaryStructure]:
        row = self.db.query(SalaryStructureDB).filter_by(id=structure_id).first()
        return self._to_structure(row) if row else None

    def get_structures(self) -> List[SalaryStructure]:
        rows = self.db.query(SalaryStructureDB).order_by(SalaryStructureDB.position).all()
        return [self._to_structure(row) for row in rows]

    def delete_structure(self, structure_id: str) -> bool:
        return self._delete(SalaryStructureDB, structure_id)

    # ========== Employee Operations ==========

    def save_employee(self, employee: Employee) -> EmployeeDB:
        """Save or update employee"""
        db_employee = self.db.query(EmployeeDB).filter_by(id=employee.id).first()
        if not db_employee:
            db_employee = EmployeeDB(id=employee.id, position=self._next_position(EmployeeDB))
            self.db.add(db_employee)
        db_employee.employee_code = employee.employee_id
        db_employee.name = employee.name
        db_employee.ctc = employee.ctc
        db_employee.lop_count = employee.lop_count
        db_employee.salary_structure_id = employee.salary_structure_id
        self.db.commit()
        self.db.refresh(db_employee)
        return db_employee

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        """Get employee by ID"""
        row = self.db.query(EmployeeDB).filter_by(id=employee_id).first()
        return self._to_employee(row) if row else None

    def get_employees(self) -> List[Employee]:
        """Get all employees"""
        rows = self.db.query(EmployeeDB).order_by(EmployeeDB.position).all()
        return [self._to_employee(row) for row in rows]

    def delete_employee(self, employee_id: str) -> bool:
        return self._delete(EmployeeDB, employee_id)

    # ========== Payroll Run Operations ==========

    def save_payroll_run(self, payroll_run: PayrollRun) -> PayrollRunDB:
        """Save payroll run with its breakdowns"""
        record = PayrollRunDB(
            id=payroll_run.id,
            run_date=payroll_run.date,
            working_days=payroll_run.working_days,
            total_payroll=payroll_run.total_payroll,
        )
        self.db.add(record)
        self.db.flush()

        for breakdown in payroll_run.breakdowns:
            self.db.add(BreakdownDB(
                payroll_run_id=record.id,
                employee_id=breakdown.employee_id,
                employee_name=breakdown.employee_name,
                structure_name=breakdown.structure_name,
                total_earnings=breakdown.total_earnings,
                total_deductions=breakdown.total_deductions,
                gross_pay=breakdown.gross_pay,
                net_pay=breakdown.net_pay,
                lop_days=breakdown.lop_days,
                working_days=breakdown.working_days,
                payable_days=breakdown.payable_days,
                data_json=json.dumps(breakdown_to_dict(breakdown)),
            ))

        self.db.commit()
        self.db.refresh(record)
        logger.info(f"Saved payroll run {record.id} with {len(payroll_run.breakdowns)} breakdowns")
        return record

    def get_payroll_run(self, run_id: str) -> Optional[PayrollRun]:
        """Get specific payroll run"""
        row = self.db.query(PayrollRunDB).filter_by(id=run_id).first()
        return self._to_payroll_run(row) if row else None

    def get_payroll_runs(self) -> List[PayrollRun]:
        """Get all payroll runs, newest first"""
        rows = self.db.query(PayrollRunDB).order_by(PayrollRunDB.run_date.desc()).all()
        return [self._to_payroll_run(row) for row in rows]

    # ========== Helper Methods ==========

    def _next_position(self, model) -> int:
        current = self.db.query(func.max(model.position)).scalar()
        return 0 if current is None else current + 1

    def _delete(self, model, record_id: str) -> bool:
        row = self.db.query(model).filter_by(id=record_id).first()
        if not row:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    def _to_component(self, row: ComponentDB) -> PayrollComponent:
        return PayrollComponent(
            id=row.id,
            name=row.name,
            component_type=row.component_type,
            component_category=row.component_category,
            amount=Decimal(str(row.amount or 0)),
            based_on=row.based_on or 'ctc',
            apply_lop_deduction=bool(row.apply_lop_deduction),
            formula_terms=tuple(term_from_dict(t) for t in json.loads(row.formula_json or '[]')),
        )

    def _to_structure(self, row: SalaryStructureDB) -> SalaryStructure:
        return SalaryStructure(
            id=row.id,
            name=row.name,
            component_ids=tuple(json.loads(row.component_ids_json or '[]')),
        )

    def _to_employee(self, row: EmployeeDB) -> Employee:
        return Employee(
            id=row.id,
            employee_id=row.employee_code,
            name=row.name,
            ctc=Decimal(str(row.ctc)),
            lop_count=row.lop_count or 0,
            salary_structure_id=row.salary_structure_id,
        )

    def _to_payroll_run(self, row: PayrollRunDB) -> PayrollRun:
        breakdowns: List[EmployeeSalaryBreakdown] = [
            breakdown_from_dict(json.loads(b.data_json)) for b in row.breakdowns
        ]
        return PayrollRun(
            id=row.id,
            date=row.run_date,
            working_days=row.working_days,
            breakdowns=tuple(breakdowns),
            total_payroll=Decimal(str(row.total_payroll)),
        )
