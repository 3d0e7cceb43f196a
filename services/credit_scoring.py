"""
Credit scoring and pricing for loan applications.
Every adjustment is a pure function of its inputs; the score is the base plus the sum
of independent factor points, clamped to [300, 850]. Missing attributes score 0.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping, Optional

from config import settings
from models.enums import EmploymentStatus, LoanStatus, MaritalStatus
from schemas.credit import CreditProfile, LoanHistory, ScoreFactor

BASE_SCORE = 500
MIN_SCORE = 300
MAX_SCORE = 850

CENT = Decimal("0.01")

# Keys are normalized purposes (see normalize_purpose)
DEFAULT_PURPOSE_RATES: dict[str, Decimal] = {
    "home purchase": Decimal("8.50"),
    "housing": Decimal("8.50"),
    "car purchase": Decimal("9.50"),
    "car": Decimal("9.50"),
    "education": Decimal("7.50"),
    "business": Decimal("10.50"),
    "personal": Decimal("12.00"),
    "health": Decimal("8.00"),
    "travel": Decimal("11.00"),
    "wedding": Decimal("9.00"),
    "home renovation": Decimal("8.75"),
    "debt consolidation": Decimal("11.50"),
}

REWARDED_PURPOSES = frozenset({"personal", "home", "housing", "home purchase", "home renovation", "education"})

PAID_OFF_POINTS = 15
DEFAULT_POINTS = -50
REJECTION_POINTS = -20


def normalize_purpose(purpose: str | None) -> str:
    """'  Home_Purchase ' -> 'home purchase'."""
    if not purpose:
        return ""
    return " ".join(purpose.replace("_", " ").lower().split())


def _dec(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return value if isinstance(value, Decimal) else Decimal(str(value))


# ---------------------------------------------------------------------------
# Individual factors: each returns (points, detail)
# ---------------------------------------------------------------------------

def _income_points(income: Optional[Decimal]) -> tuple[int, str]:
    if income is None:
        return 0, "income not provided"
    if income >= 100_000:
        return 40, "income ≥ 100,000"
    if income >= 60_000:
        return 25, "income ≥ 60,000"
    if income >= 30_000:
        return 10, "income ≥ 30,000"
    if income > 0:
        return -20, "income < 30,000"
    return -50, "no income"


def _dti_points(income: Optional[Decimal], debts: Optional[Decimal], amount: Decimal) -> tuple[int, str]:
    if income is None:
        return 0, "income not provided"
    if income <= 0:
        return -50, "debt cannot be serviced without income"
    ratio = ((debts or Decimal(0)) + amount) / income * 100
    detail = f"DTI {ratio.quantize(Decimal('0.1'))}%"
    if ratio <= 20:
        return 30, detail
    if ratio <= 36:
        return 10, detail
    if ratio <= 50:
        return -20, detail
    return -50, detail


_EMPLOYMENT_POINTS = {
    EmploymentStatus.EMPLOYED.value: 30,
    EmploymentStatus.SELF_EMPLOYED.value: 15,
    EmploymentStatus.UNEMPLOYED.value: -40,
    EmploymentStatus.OTHER.value: 0,
}


def _employment_points(status: Optional[str]) -> tuple[int, str]:
    if not status:
        return 0, "employment not provided"
    key = status.strip().upper()
    return _EMPLOYMENT_POINTS.get(key, 0), key


def _age_points(age: Optional[int]) -> tuple[int, str]:
    if age is None:
        return 0, "age not provided"
    if age < 21:
        return -15, f"age {age}"
    if age < 25:
        return 0, f"age {age}"
    if age <= 55:
        return 10, f"age {age}"
    if age <= 65:
        return 5, f"age {age}"
    return -10, f"age {age}"


_MARITAL_POINTS = {
    MaritalStatus.MARRIED.value: 10,
    MaritalStatus.DIVORCED.value: -5,
}


def _marital_points(status: Optional[str]) -> tuple[int, str]:
    if not status:
        return 0, "marital status not provided"
    key = status.strip().upper()
    return _MARITAL_POINTS.get(key, 0), key


def _history_length_points(years: Optional[int]) -> tuple[int, str]:
    if years is None:
        return 0, "credit history not provided"
    if years >= 10:
        return 40, f"{years} years of history"
    if years >= 5:
        return 25, f"{years} years of history"
    if years >= 2:
        return 10, f"{years} years of history"
    return -10, f"{years} years of history"


def _late_payment_points(count: Optional[int]) -> tuple[int, str]:
    if count is None:
        return 0, "late payments not provided"
    if count == 0:
        return 20, "no late payments"
    if count <= 2:
        return -15, f"{count} late payments"
    if count <= 5:
        return -40, f"{count} late payments"
    return -80, f"{count} late payments"


def _utilization_points(pct: Optional[Decimal]) -> tuple[int, str]:
    if pct is None:
        return 0, "utilization not provided"
    detail = f"{pct}% utilization"
    if pct < 10:
        return 30, detail
    if pct < 30:
        return 20, detail
    if pct < 50:
        return 0, detail
    if pct < 75:
        return -20, detail
    return -40, detail


def _inquiry_points(count: Optional[int]) -> tuple[int, str]:
    if count is None:
        return 0, "inquiries not provided"
    if count == 0:
        return 10, "no recent inquiries"
    if count <= 2:
        return 0, f"{count} inquiries"
    if count <= 5:
        return -15, f"{count} inquiries"
    return -30, f"{count} inquiries"


def _credit_mix_points(mix: Iterable[str]) -> tuple[int, str]:
    categories = {c.strip().lower() for c in mix if c and c.strip()}
    n = len(categories)
    if n >= 3:
        points = 20
    elif n == 2:
        points = 10
    elif n == 1:
        points = 5
    else:
        points = 0
    return points, f"{n} credit categories"


def _prior_loan_points(history: LoanHistory) -> tuple[int, str]:
    points = (
        history.paid_off * PAID_OFF_POINTS
        + history.defaulted * DEFAULT_POINTS
        + history.rejected * REJECTION_POINTS
    )
    return points, f"{history.paid_off} paid off, {history.defaulted} defaulted, {history.rejected} rejected"


def _amount_points(amount: Decimal) -> tuple[int, str]:
    if amount > 30_000:
        return -75, "amount > 30,000"
    if amount > 10_000:
        return -50, "amount > 10,000"
    if amount > 5_000:
        return -25, "amount > 5,000"
    return 0, "amount ≤ 5,000"


def _term_points(term_months: int) -> tuple[int, str]:
    if term_months > 60:
        return -30, f"{term_months} months"
    if term_months > 36:
        return -20, f"{term_months} months"
    if term_months > 12:
        return -10, f"{term_months} months"
    return 0, f"{term_months} months"


def _purpose_points(purpose: str) -> tuple[int, str]:
    p = normalize_purpose(purpose)
    if "business" in p.split():
        return -30, p
    if p in REWARDED_PURPOSES:
        return 10, p
    return 0, p or "unspecified"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def score_breakdown(
    profile: CreditProfile,
    amount: Decimal | int,
    term_months: int,
    purpose: str,
    history: LoanHistory | None = None,
) -> list[ScoreFactor]:
    """Per-factor points for an application; the score is BASE_SCORE plus their sum, clamped."""
    amount = _dec(amount)
    history = history or LoanHistory()
    income = _dec(profile.annual_income)
    factors = [
        ("Income", _income_points(income)),
        ("Debt-to-Income", _dti_points(income, _dec(profile.existing_debts), amount)),
        ("Employment", _employment_points(profile.employment_status)),
        ("Age", _age_points(profile.age)),
        ("Marital Status", _marital_points(profile.marital_status)),
        ("Credit History Length", _history_length_points(profile.credit_history_years)),
        ("Late Payments", _late_payment_points(profile.late_payments)),
        ("Credit Utilization", _utilization_points(_dec(profile.credit_utilization))),
        ("Credit Inquiries", _inquiry_points(profile.credit_inquiries)),
        ("Credit Mix", _credit_mix_points(profile.credit_mix)),
        ("Prior Loans", _prior_loan_points(history)),
        ("Loan Amount", _amount_points(amount)),
        ("Loan Term", _term_points(term_months)),
        ("Purpose", _purpose_points(purpose)),
    ]
    return [ScoreFactor(name=name, points=points, detail=detail) for name, (points, detail) in factors]


def calculate_credit_score(
    profile: CreditProfile,
    amount: Decimal | int,
    term_months: int,
    purpose: str,
    history: LoanHistory | None = None,
) -> int:
    total = BASE_SCORE + sum(f.points for f in score_breakdown(profile, amount, term_months, purpose, history))
    return max(MIN_SCORE, min(MAX_SCORE, total))


def summarize_history(applications: Iterable[Any], as_of: datetime | None = None) -> LoanHistory:
    """
    Count outcomes of earlier applications.
    Paid off: approved with nothing pending. Defaulted: approved, still owing, and past its term.
    """
    as_of = as_of or datetime.now(timezone.utc)
    paid_off = defaulted = rejected = 0
    for app in applications:
        if app.status == LoanStatus.REJECTED.value:
            rejected += 1
            continue
        if app.status != LoanStatus.APPROVED.value:
            continue
        pending = _dec(app.pending_amount) or Decimal(0)
        if pending <= 0:
            paid_off += 1
        elif app.decision_at is not None:
            decided = app.decision_at
            if decided.tzinfo is None:
                decided = decided.replace(tzinfo=timezone.utc)
            # months approximated as 30 days
            if decided + timedelta(days=30 * app.term_months) < as_of:
                defaulted += 1
    return LoanHistory(paid_off=paid_off, defaulted=defaulted, rejected=rejected)


class RateTable:
    """
    Purpose-keyed rate lookup: manager overrides first, then defaults, then a fallback.
    Both maps are keyed by normalized purpose.
    """

    def __init__(
        self,
        overrides: Mapping[str, Decimal] | None = None,
        defaults: Mapping[str, Decimal] | None = None,
        fallback: Decimal | None = None,
    ):
        self.overrides = {normalize_purpose(k): _dec(v) for k, v in (overrides or {}).items()}
        self.defaults = {
            normalize_purpose(k): _dec(v) for k, v in (DEFAULT_PURPOSE_RATES if defaults is None else defaults).items()
        }
        self.fallback = _dec(fallback) if fallback is not None else settings.fallback_interest_rate

    def override_for(self, purpose: str) -> Optional[Decimal]:
        return self.overrides.get(normalize_purpose(purpose))

    def base_rate(self, purpose: str) -> Decimal:
        return self.defaults.get(normalize_purpose(purpose), self.fallback)

    def effective_rates(self) -> dict[str, Decimal]:
        """Default table with overrides applied (unadjusted for score)."""
        return {**self.defaults, **self.overrides}


def _score_tier_adjustment(credit_score: int) -> Decimal:
    if credit_score >= 750:
        return Decimal("-1.00")
    if credit_score >= 650:
        return Decimal("-0.50")
    if credit_score < 450:
        return Decimal("2.00")
    if credit_score < 550:
        return Decimal("1.00")
    return Decimal("0.00")


def calculate_interest_rate(
    purpose: str,
    credit_score: int,
    rate_table: RateTable | None = None,
    min_rate: Decimal | None = None,
) -> Decimal:
    """Annual percentage rate, 2 decimals. An override is returned as-is; computed rates are floored."""
    rate_table = rate_table or RateTable()
    override = rate_table.override_for(purpose)
    if override is not None:
        return override.quantize(CENT, rounding=ROUND_HALF_UP)
    floor = min_rate if min_rate is not None else settings.min_interest_rate
    rate = rate_table.base_rate(purpose) + _score_tier_adjustment(credit_score)
    return max(rate, floor).quantize(CENT, rounding=ROUND_HALF_UP)


def is_eligible(
    credit_score: int,
    amount: Decimal | int,
    min_score: int | None = None,
    max_amount: Decimal | None = None,
) -> bool:
    min_score = settings.eligibility_min_score if min_score is None else min_score
    max_amount = settings.eligibility_max_amount if max_amount is None else max_amount
    return credit_score > min_score and _dec(amount) < max_amount


def monthly_installment(principal: Decimal | int, annual_rate: Decimal | int, term_months: int) -> Decimal:
    """Equated monthly installment for an amortising loan."""
    principal = _dec(principal)
    if term_months <= 0:
        raise ValueError("term_months must be positive")
    monthly_rate = _dec(annual_rate) / 12 / 100
    if monthly_rate == 0:
        return (principal / term_months).quantize(CENT, rounding=ROUND_HALF_UP)
    growth = (1 + monthly_rate) ** term_months
    emi = principal * monthly_rate * growth / (growth - 1)
    return emi.quantize(CENT, rounding=ROUND_HALF_UP)
