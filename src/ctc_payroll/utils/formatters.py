from decimal import Decimal, ROUND_HALF_UP

RUPEE = "₹"

def group_indian(digits: str) -> str:
    """Group an integer digit string the Indian way (12,34,567)"""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])

def format_currency(amount, symbol: str = RUPEE) -> str:
    """Format amount for display, no decimals (₹1,00,000)"""
    value = Decimal(str(amount)).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{group_indian(str(abs(value)))}"

def format_days(payable_days: int, working_days: int) -> str:
    return f"{payable_days}/{working_days}"
