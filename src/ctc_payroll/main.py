import argparse
import logging
from config.settings import LOG_LEVEL, DEFAULT_WORKING_DAYS, STRICT_REFERENCES, CURRENCY_SYMBOL
from .database.db import init_db, SessionLocal
from .database.repository import PayrollRepository
from .processors.payroll_runner import run_payroll
from .processors.payroll_register_generator import PayrollRegisterGenerator
from .processors.payslip_generator import PayslipGenerator
from .utils.formatters import format_currency, format_days
from .utils.validators import find_reference_problems

logger = logging.getLogger(__name__)

def configure_logging():
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

def main(argv=None):
    """Run payroll for every employee in the database"""
    parser = argparse.ArgumentParser(description="Run monthly payroll")
    parser.add_argument("--working-days", type=int, default=DEFAULT_WORKING_DAYS)
    parser.add_argument("--period", default="", help="label printed on payslips, e.g. 2025-08")
    parser.add_argument("--no-save", action="store_true", help="calculate only")
    args = parser.parse_args(argv)

    configure_logging()
    logger.info("Starting payroll run")
    init_db()

    db = SessionLocal()
    try:
        repo = PayrollRepository(db)
        catalog = repo.get_components()

        if STRICT_REFERENCES:
            problems = find_reference_problems(catalog)
            if problems:
                for problem in problems:
                    logger.error(problem)
                return 1

        try:
            payroll_run = run_payroll(
                repo.get_employees(), repo.get_structures(), catalog, args.working_days, DEFAULT_WORKING_DAYS
            )
        except ValueError as e:
            logger.error(str(e))
            return 1

        print("=" * 60)
        print(f"Payroll run {payroll_run.id} ({payroll_run.working_days} working days)")
        print("=" * 60)
        for breakdown in payroll_run.breakdowns:
            days = format_days(breakdown.payable_days, breakdown.working_days)
            print(f"{breakdown.employee_name:<30} {days:>8} {format_currency(breakdown.net_pay, CURRENCY_SYMBOL):>20}")
        print("-" * 60)
        print(f"{'Total payroll':<39} {format_currency(payroll_run.total_payroll, CURRENCY_SYMBOL):>20}")

        if not args.no_save:
            repo.save_payroll_run(payroll_run)
            PayrollRegisterGenerator().generate(payroll_run)
            generator = PayslipGenerator()
            for breakdown in payroll_run.breakdowns:
                generator.generate(breakdown, args.period)
            logger.info("Payroll run saved")
    finally:
        db.close()

    return 0

if __name__ == "__main__":
    raise SystemExit(main())
