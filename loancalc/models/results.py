from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class ScheduleEntry:
    payment_number: int  # 1-based
    monthly_payment: Decimal
    principal_payment: Decimal  # Includes any overpayment made this month
    interest_payment: Decimal
    balance: Decimal  # After this month's payment
    interest_rate: Decimal  # Annual percent in force this month
    is_overpayment: bool = False
    overpayment_amount: Decimal = Decimal("0")
    total_interest: Decimal = Decimal("0")  # Cumulative
    total_payment: Decimal = Decimal("0")  # Cumulative, payments + overpayments
    fees: Decimal = Decimal("0")
    payment_date: date | None = None


@dataclass(frozen=True)
class YearlyData:
    year: int
    principal: Decimal
    interest: Decimal
    payment: Decimal
    overpayment: Decimal
    fees: Decimal
    balance: Decimal  # Year-end
    total_interest: Decimal  # Cumulative


@dataclass(frozen=True)
class CalculationResults:
    monthly_payment: Decimal  # First scheduled installment
    total_interest: Decimal
    schedule: list[ScheduleEntry]
    yearly_data: list[YearlyData]
    original_term: int  # Years
    actual_term: Decimal  # Years, months-to-zero-balance / 12
    actual_term_months: int
    one_time_fees: Decimal = Decimal("0")
    recurring_fees: Decimal = Decimal("0")
    early_repayment_fees: Decimal = Decimal("0")
    total_cost: Decimal = Decimal("0")
    apr: Decimal | None = None

    @property
    def total_overpayments(self) -> Decimal:
        return sum((e.overpayment_amount for e in self.schedule), Decimal("0"))

    @property
    def total_paid(self) -> Decimal:
        return self.schedule[-1].total_payment if self.schedule else Decimal("0")
