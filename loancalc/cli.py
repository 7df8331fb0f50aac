"""Command-line mortgage calculator.

Usage:
    python -m loancalc.cli 300000 4.5 30
    python -m loancalc.cli 300000 4.5 30 --overpay 10000@12 --overpay 200@1:monthly
    python -m loancalc.cli 300000 4.5 30 --rate-change 60:5.25 --yearly
    python -m loancalc.cli 300000 4.5 30 --optimize 300 20000 --goal balanced
"""

import argparse
import sys
from datetime import date
from decimal import Decimal, InvalidOperation

from loancalc.engine.optimization import optimize_overpayments
from loancalc.engine.scenario import calculate_loan_details
from loancalc.exceptions import LoanCalcError
from loancalc.logging_config import setup_logging
from loancalc.models.loan import (
    AdditionalCosts,
    FeeSpec,
    FeeType,
    Frequency,
    InterestRatePeriod,
    LoanDetails,
    OverpaymentDetails,
    OverpaymentEffect,
    RateChange,
    RepaymentModel,
)
from loancalc.models.optimization import OptimizationGoal, OptimizationParameters


def _decimal(value: str) -> Decimal:
    try:
        return Decimal(value.replace(",", ""))
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")


def parse_overpayment(value: str) -> OverpaymentDetails:
    """AMOUNT@MONTH[:FREQUENCY[:EFFECT]], e.g. ``200@1:monthly:reducePayment``."""
    try:
        amount, rest = value.split("@", 1)
        parts = rest.split(":")
        frequency = Frequency(parts[1]) if len(parts) > 1 else Frequency.ONE_TIME
        effect = OverpaymentEffect(parts[2]) if len(parts) > 2 else OverpaymentEffect.REDUCE_TERM
        return OverpaymentDetails(
            amount=_decimal(amount),
            start_month=int(parts[0]),
            frequency=frequency,
            effect=effect,
        )
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"expected AMOUNT@MONTH[:FREQUENCY[:EFFECT]], got {value!r}"
        )


def parse_rate_change(value: str) -> RateChange:
    """MONTH:RATE[:YEARS], e.g. ``60:5.25``."""
    try:
        parts = value.split(":")
        years = _decimal(parts[2]) if len(parts) > 2 else None
        return RateChange(month=int(parts[0]), new_rate=_decimal(parts[1]), remaining_term_years=years)
    except (ValueError, IndexError):
        raise argparse.ArgumentTypeError(f"expected MONTH:RATE[:YEARS], got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mortgage amortization calculator")
    parser.add_argument("principal", type=_decimal, help="Loan amount")
    parser.add_argument("rate", type=_decimal, help="Annual interest rate in percent (e.g. 4.5)")
    parser.add_argument("term", type=int, help="Loan term in years")
    parser.add_argument(
        "--model",
        choices=[m.value for m in RepaymentModel],
        default=RepaymentModel.EQUAL_INSTALLMENTS.value,
        help="Repayment model (default: equalInstallments)",
    )
    parser.add_argument("--start-date", type=date.fromisoformat, help="First payment date (YYYY-MM-DD)")
    parser.add_argument("--overpay", type=parse_overpayment, action="append", default=[],
                        help="Overpayment AMOUNT@MONTH[:FREQUENCY[:EFFECT]] (repeatable)")
    parser.add_argument("--rate-change", type=parse_rate_change, action="append", default=[],
                        help="Rate change MONTH:RATE[:YEARS] (repeatable)")
    parser.add_argument("--origination-fee", type=_decimal, help="Origination fee amount")
    parser.add_argument("--origination-pct", action="store_true",
                        help="Treat --origination-fee as a percentage of principal")
    parser.add_argument("--optimize", nargs=2, type=_decimal, metavar=("MONTHLY", "ONE_TIME"),
                        help="Search overpayment strategies within these caps")
    parser.add_argument("--goal", choices=[g.value for g in OptimizationGoal],
                        default=OptimizationGoal.MAXIMIZE_INTEREST_SAVINGS.value)
    parser.add_argument("--yearly", action="store_true", help="Print the yearly breakdown")
    parser.add_argument("--log-level", default=None, help="Logging level (default from settings)")
    return parser


def build_loan(args: argparse.Namespace) -> LoanDetails:
    costs = None
    if args.origination_fee is not None:
        fee_type = FeeType.PERCENTAGE if args.origination_pct else FeeType.FIXED
        costs = AdditionalCosts(origination_fee=FeeSpec(args.origination_fee, fee_type))
    return LoanDetails(
        principal=args.principal,
        interest_rate_periods=[InterestRatePeriod(start_month=1, interest_rate=args.rate)],
        loan_term=args.term,
        repayment_model=RepaymentModel(args.model),
        overpayment_plans=args.overpay,
        start_date=args.start_date,
        additional_costs=costs,
    )


def print_results(results, yearly: bool) -> None:
    print(f"\n{'=' * 60}")
    print("  Loan Summary")
    print(f"{'=' * 60}")
    print(f"  Monthly payment:   {results.monthly_payment:>14,.2f}")
    print(f"  Total interest:    {results.total_interest:>14,.2f}")
    print(f"  One-time fees:     {results.one_time_fees:>14,.2f}")
    print(f"  Recurring fees:    {results.recurring_fees:>14,.2f}")
    print(f"  Total cost:        {results.total_cost:>14,.2f}")
    print(f"  APR:               {results.apr:>13}%")
    print(f"  Term:              {results.actual_term_months:>8} months ({results.actual_term} yrs)")
    print()

    if yearly:
        print(f"  {'Year':>4}  {'Principal':>12}  {'Interest':>12}  {'Overpaid':>10}  {'Balance':>12}")
        for y in results.yearly_data:
            print(f"  {y.year:>4}  {y.principal:>12,.2f}  {y.interest:>12,.2f}  "
                  f"{y.overpayment:>10,.2f}  {y.balance:>12,.2f}")
        print()


def print_optimization(result) -> None:
    print(f"  Best strategy:     {result.strategy_name}")
    print(f"  Interest saved:    {result.interest_saved:>14,.2f} (present value)")
    print(f"  Nominal saved:     {result.nominal_interest_saved:>14,.2f}")
    print(f"  Years saved:       {result.time_or_payment_saved:>14}")
    print()
    for s in result.all_strategies:
        marker = "*" if s.is_best else " "
        print(f"  {marker} {s.name:<30} {s.interest_saved:>12,.2f}  ratio {s.effectiveness_ratio}")
    print()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        loan = build_loan(args)
        print_results(calculate_loan_details(loan, args.rate_change), args.yearly)
        if args.optimize:
            params = OptimizationParameters(
                max_monthly_overpayment=args.optimize[0],
                max_one_time_overpayment=args.optimize[1],
                optimization_strategy=OptimizationGoal(args.goal),
            )
            print_optimization(optimize_overpayments(loan, params))
    except LoanCalcError as e:
        print(f"error: {e.message}", file=sys.stderr)
        for detail in e.details.get("errors", []):
            print(f"  - {detail}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
