"""
Pydantic schemas for the mortgage calculator.
Request models enforce the boundary constraints; result models mirror the camelCase JSON contract.
"""
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from estatehub.core.errors import register_field_messages


class CamelModel(BaseModel):
    """Base model exposing camelCase JSON while keeping snake_case attributes."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestModel(CamelModel):
    """
    Base for client payloads.
    Numbers must be finite JSON numbers (or numeric strings); booleans are not numbers here.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False)

    @field_validator("*", mode="before")
    @classmethod
    def reject_booleans(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, bool) and cls.model_fields[info.field_name].annotation in (int, float):
            raise PydanticCustomError("float_type", "Input should be a valid number")
        return value


class LoanInputs(RequestModel):
    """Fixed-rate loan to amortize."""
    principal: float = Field(..., gt=0, description="Loan principal")
    interest_rate: float = Field(..., ge=0, description="Annual interest rate in percent (5 = 5%)")
    loan_term: int = Field(..., gt=0, description="Loan term in years")


class AmortizationRow(CamelModel):
    """Represents a single retained month of the amortization schedule."""
    month: int = Field(..., ge=1, description="Month number (1-based)")
    payment: float = Field(..., description="Scheduled monthly payment")
    principal_payment: float = Field(..., description="Principal portion of the payment")
    interest_payment: float = Field(..., description="Interest portion of the payment")
    remaining_balance: float = Field(..., ge=0, description="Balance after the payment, floored at zero")


class PaymentResult(CamelModel):
    monthly_payment: float
    total_payment: float
    total_interest: float
    amortization_schedule: List[AmortizationRow] = Field(
        ..., description="First year, every 12th month and the final month"
    )


class AffordabilityInputs(RequestModel):
    """Borrower profile used to size the maximum home price."""
    annual_income: float = Field(..., gt=0, description="Gross annual income")
    monthly_debts: float = Field(..., ge=0, description="Existing monthly debt payments")
    down_payment: float = Field(..., ge=0, description="Cash available as down payment")
    interest_rate: float = Field(..., ge=0, description="Annual interest rate in percent")
    loan_term: int = Field(..., gt=0, description="Loan term in years")
    property_tax_rate: float = Field(..., ge=0, description="Annual property tax in percent of home price")
    insurance_rate: float = Field(..., ge=0, description="Annual insurance in percent of home price")


class PaymentBreakdown(CamelModel):
    principal_and_interest: float
    taxes: float
    insurance: float


class AffordabilityResult(CamelModel):
    """
    Affordability sizing.
    Values can be negative when existing debts already exceed the back-end DTI ceiling.
    """
    max_home_price: float
    monthly_payment: float = Field(..., description="All-in monthly payment (P&I + taxes + insurance)")
    payment_breakdown: PaymentBreakdown
    debt_to_income_ratio: float = Field(..., description="Debt-to-income ratio in percent")


class LoanOption(RequestModel):
    """A competing loan offer."""
    amount: float = Field(..., gt=0, description="Loan amount")
    interest_rate: float = Field(..., ge=0, description="Annual interest rate in percent")
    term: int = Field(..., gt=0, description="Loan term in years")
    loan_type: str = Field(..., alias="type", description="Free-form loan type label (e.g. '30-year fixed')")
    points: float = Field(..., ge=0, description="Discount points in percent of the amount")
    fees: float = Field(..., ge=0, description="Fixed closing fees")


class LoanComparisonRequest(RequestModel):
    loan_options: List[LoanOption] = Field(..., min_length=1, max_length=3)


class LoanComparisonResult(LoanOption):
    """Loan option echoed back with its cost figures."""
    monthly_payment: float
    total_interest: float
    total_cost: float = Field(..., description="amount + total interest + points cost + fees")


class PaymentResponse(CamelModel):
    success: bool = True
    results: PaymentResult


class AffordabilityResponse(CamelModel):
    success: bool = True
    results: AffordabilityResult


class LoanComparisonResponse(CamelModel):
    success: bool = True
    results: List[LoanComparisonResult]


register_field_messages({
    ("loanOptions", "too_short"): "At least one loan option is required",
    ("loanOptions", "too_long"): "Maximum of three loan options allowed",
    ("loanOptions", "missing"): "Loan options are required",
    ("amount", "greater_than"): "Loan amount must be a positive number",
    ("amount", "missing"): "Loan amount is required",
    ("type", "missing"): "Loan type is required",
    ("type", "string_type"): "Loan type must be a string",
    ("term", "missing"): "Loan term is required",
    ("term", "greater_than"): "Loan term must be a positive number",
    ("term", "int_from_float"): "Loan term must be an integer",
    ("points", "missing"): "Points are required",
    ("fees", "missing"): "Fees are required",
    ("monthlyDebts", "missing"): "Monthly debts are required",
})
