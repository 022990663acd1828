from fastapi import APIRouter, Depends, Request
from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from typing import Any, Dict
import logging

from app.schemas.loan_schema import (
    LoanRequest,
    EligibilityResult,
    ErrorResponse,
    LoanApplicationForm,
    FormValidationResult
)
from app.services.eligibility_service import EligibilityEvaluator, get_eligibility_evaluator
from app.services.form_validation_service import validate_application_form
from app.utils.numbers import parse_number

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "loanAmount", "mobileNumber", "panNumber", "monthlyIncome")

router = APIRouter(prefix="/api/loan", tags=["Loan Eligibility"])


def _error_response(status_code: int, error: str, details: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, details=details).model_dump()
    )


# Mirrors a truthiness check: absent, null, "", 0 and false all count as missing
def _missing_fields(data: Any) -> bool:
    if not isinstance(data, dict):
        return True
    return any(not data.get(field) for field in REQUIRED_FIELDS)


# Numbers and numeric strings both count; unparseable text is left for schema validation
def _is_non_positive(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, str):
        value = parse_number(value)
    return isinstance(value, (int, float)) and value <= 0


def _format_validation_error(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )


# Evaluates loan eligibility for a single applicant
@router.post(
    "/checkEligibility",
    response_model=EligibilityResult,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse}
    }
)
async def check_eligibility(
    request: Request,
    evaluator: EligibilityEvaluator = Depends(get_eligibility_evaluator)
):
    try:
        logger.info("Received eligibility check request")
        data = await request.json()

        if _missing_fields(data):
            logger.error("Missing required fields")
            return _error_response(
                status.HTTP_400_BAD_REQUEST,
                "Missing required fields",
                "All fields (name, loanAmount, mobileNumber, panNumber, monthlyIncome) are required"
            )

        if _is_non_positive(data["loanAmount"]) or _is_non_positive(data["monthlyIncome"]):
            logger.error("Invalid numeric values")
            return _error_response(
                status.HTTP_400_BAD_REQUEST,
                "Invalid input",
                "Loan amount and monthly income must be positive numbers"
            )

        try:
            loan_request = LoanRequest(**{field: data[field] for field in REQUIRED_FIELDS})
        except ValidationError as e:
            details = _format_validation_error(e)
            logger.error(f"Invalid request data: {details}")
            return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid input", details)

        result = evaluator.evaluate(loan_request)

        logger.info("Eligibility check completed successfully")
        return result

    except Exception as e:
        logger.error(f"Error processing eligibility check: {e}", exc_info=True)
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            str(e) or "Unknown error occurred"
        )


# Checks raw form input against the applicant-facing rules without evaluating it
@router.post("/validate", response_model=FormValidationResult)
async def validate_form(form: LoanApplicationForm):
    return validate_application_form(form)


@router.get("/health", response_model=Dict[str, str])
async def health():
    return {"status": "healthy", "message": "Loan eligibility service is running!"}
