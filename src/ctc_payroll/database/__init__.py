from .db import engine, SessionLocal, Base, init_db
from .models import (
    ComponentDB,
    SalaryStructureDB,
    EmployeeDB,
    PayrollRunDB,
    BreakdownDB
)
from .repository import PayrollRepository

__all__ = [
    'engine',
    'SessionLocal',
    'Base',
    'init_db',
    'ComponentDB',
    'SalaryStructureDB',
    'EmployeeDB',
    'PayrollRunDB',
    'BreakdownDB',
    'PayrollRepository'
]
