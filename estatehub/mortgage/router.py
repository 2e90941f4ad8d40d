"""
FastAPI Router for the mortgage calculator endpoints.
Input validation happens in the request schemas; handlers only call the pure engine.
"""
from typing import Annotated, Any, Dict, Optional
from uuid import uuid4

from fastapi import APIRouter, Header, HTTPException

from estatehub.core.logger import audit_log, get_logger_with_correlation
from estatehub.mortgage.schemas import (
    AffordabilityInputs,
    AffordabilityResponse,
    LoanComparisonRequest,
    LoanComparisonResponse,
    LoanInputs,
    PaymentResponse,
)
from estatehub.mortgage.service import calculate_payment, compare_loans, estimate_affordability

router = APIRouter(tags=["Mortgage"])

# Discovery endpoint served outside the API prefix
info_router = APIRouter(tags=["Mortgage"])


@router.post("/calculate", response_model=PaymentResponse)
def calculate_mortgage(
    data: LoanInputs,
    x_correlation_id: Annotated[Optional[str], Header()] = None
) -> PaymentResponse:
    """
    **Mortgage payment calculator**

    - **principal**: Loan amount
    - **interestRate**: Annual rate in percent (5 = 5%)
    - **loanTerm**: Term in years

    **Returns:**
    - Monthly payment, total payment and total interest
    - Amortization schedule for the first 12 months, every 12th month and the final month
    """
    correlation_id = x_correlation_id or str(uuid4())
    logger = get_logger_with_correlation(correlation_id)

    try:
        logger.info(f"Starting mortgage calculation: {data.model_dump()}")
        results = calculate_payment(data)
    except Exception as e:
        logger.error(f"Error calculating mortgage: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error calculating mortgage")

    audit_log(
        action="mortgage_calculation",
        user="anonymous",
        resource="mortgage",
        details={
            "correlation_id": correlation_id,
            "principal": data.principal,
            "loan_term": data.loan_term,
            "schedule_rows": len(results.amortization_schedule)
        }
    )

    return PaymentResponse(results=results)


@router.post("/affordability", response_model=AffordabilityResponse)
def calculate_affordability(
    data: AffordabilityInputs,
    x_correlation_id: Annotated[Optional[str], Header()] = None
) -> AffordabilityResponse:
    """
    **Affordability estimator**

    Sizes the maximum home price under the 28% housing / 36% total debt-to-income ceilings.
    Property tax and insurance rates are annual percentages of the home price.
    """
    correlation_id = x_correlation_id or str(uuid4())
    logger = get_logger_with_correlation(correlation_id)

    try:
        logger.info(f"Starting affordability estimate: annual_income={data.annual_income}")
        results = estimate_affordability(data)
    except Exception as e:
        logger.error(f"Error calculating affordability: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error calculating affordability")

    return AffordabilityResponse(results=results)


@router.post("/compare", response_model=LoanComparisonResponse)
def compare_loan_options(
    data: LoanComparisonRequest,
    x_correlation_id: Annotated[Optional[str], Header()] = None
) -> LoanComparisonResponse:
    """
    **Loan comparison**

    Accepts one to three offers and returns each with its monthly payment,
    total interest and total cost (amount + interest + points + fees), in input order.
    """
    correlation_id = x_correlation_id or str(uuid4())
    logger = get_logger_with_correlation(correlation_id)

    try:
        logger.info(f"Starting loan comparison: options={len(data.loan_options)}")
        results = compare_loans(data.loan_options)
    except Exception as e:
        logger.error(f"Error comparing loans: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error comparing loans")

    return LoanComparisonResponse(results=results)


@info_router.get("/mortgage")
def mortgage_info() -> Dict[str, Any]:
    """Lets clients probe that the mortgage calculator is deployed."""
    return {
        "success": True,
        "message": "Mortgage calculator API endpoint"
    }
