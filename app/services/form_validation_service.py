import logging
import math
import re
from typing import Dict, Optional

from app.eligibility_policy import PAN_PATTERN
from app.schemas.loan_schema import LoanApplicationForm, LoanRequest, FormValidationResult
from app.utils.masking import mask_mobile, mask_pan
from app.utils.numbers import parse_number

logger = logging.getLogger(__name__)

NAME_RE = re.compile(r"^[a-zA-Z\s]+$", re.ASCII)
MOBILE_RE = re.compile(r"^[6-9]\d{9}$", re.ASCII)
PAN_RE = re.compile(PAN_PATTERN)

MIN_LOAN_AMOUNT = 10000
MAX_LOAN_AMOUNT = 10000000
MIN_FORM_MONTHLY_INCOME = 5000


def _check_name(name: str) -> Optional[str]:
    if len(name) < 2:
        return "Name must be at least 2 characters"
    if len(name) > 100:
        return "Name must be less than 100 characters"
    if not NAME_RE.fullmatch(name):
        return "Name can only contain letters and spaces"
    return None


def _check_loan_amount(raw: str) -> Optional[str]:
    if not raw:
        return "Loan amount is required"
    value = parse_number(raw)
    if math.isnan(value) or value <= 0:
        return "Loan amount must be a positive number"
    if value < MIN_LOAN_AMOUNT:
        return "Minimum loan amount is ₹10,000"
    if value > MAX_LOAN_AMOUNT:
        return "Maximum loan amount is ₹1,00,00,000"
    return None


def _check_mobile_number(mobile: str) -> Optional[str]:
    if not MOBILE_RE.fullmatch(mobile):
        return "Invalid mobile number. Must be 10 digits starting with 6-9"
    return None


def _check_pan_number(pan: str) -> Optional[str]:
    if not PAN_RE.fullmatch(pan):
        return "Invalid PAN format. Format: ABCDE1234F"
    return None


def _check_monthly_income(raw: str) -> Optional[str]:
    if not raw:
        return "Monthly income is required"
    value = parse_number(raw)
    if math.isnan(value) or value <= 0:
        return "Monthly income must be a positive number"
    if value < MIN_FORM_MONTHLY_INCOME:
        return "Minimum monthly income is ₹5,000"
    return None


def validate_application_form(form: LoanApplicationForm) -> FormValidationResult:
    """
    Checks raw form input against the applicant-facing rules and, when every
    field passes, converts it into a ``LoanRequest`` ready for evaluation.

    Values are trimmed before checking and the PAN is uppercased. Only the
    first failing rule of each field is reported.
    """
    name = (form.name or "").strip()
    loan_amount = (form.loanAmount or "").strip()
    mobile_number = (form.mobileNumber or "").strip()
    pan_number = (form.panNumber or "").strip().upper()
    monthly_income = (form.monthlyIncome or "").strip()

    checks = {
        "name": _check_name(name),
        "loanAmount": _check_loan_amount(loan_amount),
        "mobileNumber": _check_mobile_number(mobile_number),
        "panNumber": _check_pan_number(pan_number),
        "monthlyIncome": _check_monthly_income(monthly_income),
    }
    errors: Dict[str, str] = {field: message for field, message in checks.items() if message}

    if errors:
        logger.info(
            f"Form validation failed for fields {sorted(errors)} "
            f"(mobile={mask_mobile(mobile_number)}, pan={mask_pan(pan_number)})"
        )
        return FormValidationResult(valid=False, errors=errors)

    request = LoanRequest(
        name=name,
        loanAmount=float(loan_amount),
        mobileNumber=mobile_number,
        panNumber=pan_number,
        monthlyIncome=float(monthly_income)
    )
    logger.info(f"Form validation passed: {request.masked_summary()}")
    return FormValidationResult(valid=True, request=request)
