from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

@dataclass
class Employee:
    """Employee data model"""
    id: str
    employee_id: str
    name: str
    ctc: Decimal  # annual cost-to-company
    lop_count: int = 0
    salary_structure_id: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.ctc, Decimal):
            self.ctc = Decimal(str(self.ctc))
        self.lop_count = int(self.lop_count)

    def __str__(self):
        return f"Employee({self.employee_id}, {self.name})"
