"""SIP installment rules — pure functions, no I/O.

An installment is skipped, never failed, when one of these holds. The reason
string is returned to the caller and logged.
"""

from datetime import date
from enum import Enum

from src.pf_investment.domain.models import Investment


class SkipReason(str, Enum):
    NOT_SIP = "not_sip"
    CAP_REACHED = "installment_cap_reached"
    AFTER_END_DATE = "after_sip_end_date"
    DUPLICATE_DATE = "installment_exists_for_date"


def installment_skip_reason(investment: Investment, on_date: date) -> SkipReason | None:
    """Return why an installment on `on_date` must not run, or None if it may.

    The duplicate-date rule needs a lookup and is checked by the caller.
    """
    if not investment.is_sip:
        return SkipReason.NOT_SIP
    total = investment.sip_total_installments
    if total is not None and investment.sip_installments_completed >= total:
        return SkipReason.CAP_REACHED
    if investment.sip_end_date is not None and on_date > investment.sip_end_date:
        return SkipReason.AFTER_END_DATE
    return None
