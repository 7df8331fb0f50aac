from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum


class RepaymentModel(Enum):
    EQUAL_INSTALLMENTS = "equalInstallments"
    DECREASING_INSTALLMENTS = "decreasingInstallments"


class Frequency(Enum):
    ONE_TIME = "one-time"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"


class OverpaymentEffect(Enum):
    REDUCE_TERM = "reduceTerm"
    REDUCE_PAYMENT = "reducePayment"


class FeeType(Enum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"


@dataclass(frozen=True)
class InterestRatePeriod:
    start_month: int  # 1-based, first payment the rate governs
    interest_rate: Decimal  # Annual percent, e.g. Decimal("4.5")


@dataclass(frozen=True)
class OverpaymentDetails:
    """One declared overpayment rule.

    Months and dates are interchangeable given the loan start date:
    payment 1 falls in the loan's start month.
    """
    amount: Decimal
    start_month: int | None = None
    start_date: date | None = None
    end_month: int | None = None
    end_date: date | None = None
    is_recurring: bool | None = None  # None: recurring unless frequency is one-time
    frequency: Frequency = Frequency.ONE_TIME
    effect: OverpaymentEffect = OverpaymentEffect.REDUCE_TERM

    @property
    def recurs(self) -> bool:
        if self.is_recurring is None:
            return self.frequency is not Frequency.ONE_TIME
        return self.is_recurring


@dataclass(frozen=True)
class RateChange:
    month: int  # Last payment at the old rate
    new_rate: Decimal  # Annual percent
    remaining_term_years: Decimal | None = None


@dataclass(frozen=True)
class FeeSpec:
    amount: Decimal
    type: FeeType = FeeType.FIXED


@dataclass(frozen=True)
class AdditionalCosts:
    origination_fee: FeeSpec | None = None  # One-time, pct of principal
    loan_insurance: FeeSpec | None = None  # Monthly, pct p.a. of balance
    early_repayment_fee: FeeSpec | None = None  # Per overpayment, pct of amount
    administrative_fee: FeeSpec | None = None  # Monthly, pct p.a. of balance


@dataclass(frozen=True)
class LoanDetails:
    principal: Decimal
    interest_rate_periods: list[InterestRatePeriod]
    loan_term: int  # Years
    repayment_model: RepaymentModel = RepaymentModel.EQUAL_INSTALLMENTS
    overpayment_plans: list[OverpaymentDetails] = field(default_factory=list)
    start_date: date | None = None
    additional_costs: AdditionalCosts | None = None
    name: str = ""

    @property
    def total_months(self) -> int:
        return self.loan_term * 12
