"""
Mortgage calculation engine.
Payment amortization, affordability sizing and loan comparison built on the ordinary annuity formula.

All functions are pure: no rounding is applied, presentation layers round if they need to.
"""
from typing import Iterable, List

from estatehub.core.logger import logger
from estatehub.mortgage.schemas import (
    AffordabilityInputs,
    AffordabilityResult,
    AmortizationRow,
    LoanComparisonResult,
    LoanInputs,
    LoanOption,
    PaymentBreakdown,
    PaymentResult,
)

# Front-end (housing only) and back-end (all debts) debt-to-income ceilings
FRONT_END_DTI_RATIO = 0.28
BACK_END_DTI_RATIO = 0.36

MONTHS_PER_YEAR = 12


def monthly_rate(annual_rate_percent: float) -> float:
    """5 (% per year) -> 0.05 / 12"""
    return annual_rate_percent / 100 / MONTHS_PER_YEAR


def term_months(term_years: int) -> int:
    return term_years * MONTHS_PER_YEAR


def annuity_factor(rate: float, months: int) -> float:
    """Payment per unit of principal: r(1+r)^n / ((1+r)^n - 1). Requires rate > 0."""
    growth = (1 + rate) ** months
    return (rate * growth) / (growth - 1)


def annuity_payment(principal: float, rate: float, months: int) -> float:
    """
    Fixed monthly payment that fully amortizes `principal` over `months` at monthly `rate`.

    Formula: PMT = P * [r(1+r)^n] / [(1+r)^n - 1], or P / n when r == 0.
    """
    if months < 1:
        raise ValueError(f"months must be >= 1, got {months}")
    if rate < 0:
        raise ValueError(f"monthly rate cannot be negative, got {rate}")

    if rate == 0:
        return principal / months
    growth = (1 + rate) ** months
    return principal * (rate * growth) / (growth - 1)


def is_reported_month(month: int, total_months: int) -> bool:
    """Schedule rows kept for display: the first year, each anniversary and the final payment."""
    return month <= MONTHS_PER_YEAR or month == total_months or month % MONTHS_PER_YEAR == 0


def calculate_payment(data: LoanInputs) -> PaymentResult:
    """
    Calculates the monthly payment, totals and a condensed amortization schedule.

    The running balance is never clamped; only the reported remaining_balance is floored at
    zero, so float residue on the final month does not feed back into the walk.
    """
    rate = monthly_rate(data.interest_rate)
    months = term_months(data.loan_term)

    payment = annuity_payment(data.principal, rate, months)
    if rate == 0:
        total_payment = data.principal
        total_interest = 0.0
    else:
        total_payment = payment * months
        total_interest = total_payment - data.principal

    schedule: List[AmortizationRow] = []
    balance = data.principal

    for month in range(1, months + 1):
        interest = balance * rate
        principal = payment - interest
        balance -= principal

        if is_reported_month(month, months):
            schedule.append(AmortizationRow(
                month=month,
                payment=payment,
                principal_payment=principal,
                interest_payment=interest,
                remaining_balance=max(0, balance)
            ))

    logger.info(
        f"Payment calculated: principal={data.principal}, rate={data.interest_rate}%, "
        f"term={data.loan_term}y, payment={payment:.2f}"
    )

    return PaymentResult(
        monthly_payment=payment,
        total_payment=total_payment,
        total_interest=total_interest,
        amortization_schedule=schedule
    )


def estimate_affordability(data: AffordabilityInputs) -> AffordabilityResult:
    """
    Sizes the most expensive home the borrower can carry under the 28/36 DTI rule.

    Taxes and insurance are folded into the sizing denominator as rates on the loan amount,
    then recomputed on the resulting home price, so the two passes can disagree slightly.
    Existing debts above the back-end ceiling yield negative figures; they are returned as is.
    """
    monthly_income = data.annual_income / MONTHS_PER_YEAR

    max_housing_payment = monthly_income * FRONT_END_DTI_RATIO
    max_total_debt_payment = monthly_income * BACK_END_DTI_RATIO
    available_for_housing = min(max_housing_payment, max_total_debt_payment - data.monthly_debts)

    if available_for_housing < 0:
        logger.warning(
            f"Existing debts exceed the back-end DTI ceiling: monthly_debts={data.monthly_debts}, "
            f"ceiling={max_total_debt_payment:.2f}"
        )

    rate = monthly_rate(data.interest_rate)
    months = term_months(data.loan_term)

    if rate == 0:
        max_loan_amount = available_for_housing * months
    else:
        max_loan_amount = available_for_housing / (
            annuity_factor(rate, months)
            + monthly_rate(data.property_tax_rate)
            + monthly_rate(data.insurance_rate)
        )

    max_home_price = max_loan_amount + data.down_payment

    loan_amount = max_home_price - data.down_payment
    principal_and_interest = annuity_payment(loan_amount, rate, months)

    monthly_taxes = (max_home_price * data.property_tax_rate / 100) / MONTHS_PER_YEAR
    monthly_insurance = (max_home_price * data.insurance_rate / 100) / MONTHS_PER_YEAR
    total_monthly_payment = principal_and_interest + monthly_taxes + monthly_insurance

    debt_to_income = ((total_monthly_payment + data.monthly_debts) / monthly_income) * 100

    logger.info(
        f"Affordability estimated: income={data.annual_income}, max_home_price={max_home_price:.2f}, "
        f"dti={debt_to_income:.2f}%"
    )

    return AffordabilityResult(
        max_home_price=max_home_price,
        monthly_payment=total_monthly_payment,
        payment_breakdown=PaymentBreakdown(
            principal_and_interest=principal_and_interest,
            taxes=monthly_taxes,
            insurance=monthly_insurance
        ),
        debt_to_income_ratio=debt_to_income
    )


def evaluate_loan_option(option: LoanOption) -> LoanComparisonResult:
    """Annotates one offer with its payment and total cost of ownership."""
    points_cost = (option.points / 100) * option.amount
    months = term_months(option.term)

    payment = annuity_payment(option.amount, monthly_rate(option.interest_rate), months)
    total_interest = payment * months - option.amount
    total_cost = option.amount + total_interest + points_cost + option.fees

    return LoanComparisonResult(
        **option.model_dump(),
        monthly_payment=payment,
        total_interest=total_interest,
        total_cost=total_cost
    )


def compare_loans(options: Iterable[LoanOption]) -> List[LoanComparisonResult]:
    """
    Evaluates each offer on equal footing.
    Results keep the input order; ranking is left to the caller.
    """
    results = [evaluate_loan_option(option) for option in options]
    logger.info(f"Loan comparison completed: options={len(results)}")
    return results
