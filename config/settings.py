import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

# Paths
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", str(BASE_DIR / "output")))
DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))

# Database
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'payroll.db'}")

# Ensure directories exist
OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
(OUTPUT_DIR / "payslips").mkdir(exist_ok=True)
(OUTPUT_DIR / "registers").mkdir(exist_ok=True)
DATA_DIR.mkdir(parents=True, exist_ok=True)

# Application settings
DEBUG = os.getenv("DEBUG", "False").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")

# Payroll settings
DEFAULT_WORKING_DAYS = int(os.getenv("DEFAULT_WORKING_DAYS", 30))
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₹")

# Reject dangling references and reference cycles before running payroll
STRICT_REFERENCES = os.getenv("STRICT_REFERENCES", "False").lower() == "true"
