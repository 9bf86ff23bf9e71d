from sqlalchemy import Column, Integer, String, Numeric, Text, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from .db import Base

class ComponentDB(Base):
    """Payroll component database model"""
    __tablename__ = "components"

    id = Column(String, primary_key=True)
    # Catalog order drives line-item order on breakdowns
    position = Column(Integer, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    component_type = Column(String(20), nullable=False)  # 'earnings', 'deductions'
    component_category = Column(String(20), nullable=False)  # 'fixed', 'percentage', 'formula'
    # Decimal text, a fixed scale would truncate fractional percentages
    amount = Column(String(40), nullable=False, default='0')
    based_on = Column(String, default='ctc')
    apply_lop_deduction = Column(Boolean, default=False)

    # Formula terms stored as JSON
    formula_json = Column(Text, nullable=False, default='[]')

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Component(id={self.id}, name={self.name}, category={self.component_category})>"


class SalaryStructureDB(Base):
    """Salary structure database model"""
    __tablename__ = "salary_structures"

    id = Column(String, primary_key=True)
    position = Column(Integer, nullable=False, index=True)
    name = Column(String(255), nullable=False)

    # Component ids stored as JSON
    component_ids_json = Column(Text, nullable=False, default='[]')

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<SalaryStructure(id={self.id}, name={self.name})>"


class EmployeeDB(Base):
    """Employee database model"""
    __tablename__ = "employees"

    id = Column(String, primary_key=True)
    position = Column(Integer, nullable=False, index=True)
    employee_code = Column(String(50), nullable=False)
    name = Column(String, nullable=False)
    ctc = Column(Numeric(14, 2), nullable=False)
    lop_count = Column(Integer, default=0)
    # No foreign key: structures may be deleted while still assigned
    salary_structure_id = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Employee(id={self.id}, name={self.name})>"


class PayrollRunDB(Base):
    """Saved payroll run"""
    __tablename__ = "payroll_runs"

    id = Column(String, primary_key=True)
    run_date = Column(String(40), nullable=False, index=True)
    working_days = Column(Integer, nullable=False)
    total_payroll = Column(Numeric(14, 2), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    breakdowns = relationship(
        "BreakdownDB", back_populates="payroll_run",
        cascade="all, delete-orphan", order_by="BreakdownDB.id"
    )

    def __repr__(self):
        return f"<PayrollRun(id={self.id}, date={self.run_date}, total={self.total_payroll})>"


class BreakdownDB(Base):
    """Employee salary breakdown inside a payroll run"""
    __tablename__ = "breakdowns"

    id = Column(Integer, primary_key=True, autoincrement=True)
    payroll_run_id = Column(String, ForeignKey('payroll_runs.id'), nullable=False)
    employee_id = Column(String, nullable=False, index=True)
    employee_name = Column(String, nullable=False)
    structure_name = Column(String, nullable=False)

    # Financial totals
    total_earnings = Column(Numeric(14, 2), nullable=False)
    total_deductions = Column(Numeric(14, 2), nullable=False)
    gross_pay = Column(Numeric(14, 2), nullable=False)
    net_pay = Column(Numeric(14, 2), nullable=False)

    # Day counters
    lop_days = Column(Integer, default=0)
    working_days = Column(Integer, nullable=False)
    payable_days = Column(Integer, nullable=False)

    # Line items stored as JSON
    data_json = Column(Text, nullable=False)

    # Relationships
    payroll_run = relationship("PayrollRunDB", back_populates="breakdowns")

    def __repr__(self):
        return f"<Breakdown(run={self.payroll_run_id}, employee={self.employee_id}, net={self.net_pay})>"
