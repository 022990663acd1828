from pydantic import BaseModel, Field, field_validator
from typing import Dict, Any, Optional

from app.utils.masking import mask_pan

class LoanRequest(BaseModel):
    """Applicant data submitted for an eligibility check."""
    name: str = Field(..., min_length=1)
    loanAmount: float = Field(..., gt=0, allow_inf_nan=False, description="Requested amount in whole rupees")
    mobileNumber: str
    panNumber: str
    monthlyIncome: float = Field(..., gt=0, allow_inf_nan=False)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "name": "Rahul Sharma",
                "loanAmount": 500000,
                "mobileNumber": "9876543210",
                "panNumber": "ABCDE1234F",
                "monthlyIncome": 120000
            }
        }

    # Log-safe view of the request: PAN masked, mobile number omitted
    def masked_summary(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "loanAmount": self.loanAmount,
            "monthlyIncome": self.monthlyIncome,
            "panNumber": mask_pan(self.panNumber),
        }

class EligibilityResult(BaseModel):
    """Outcome of a single eligibility evaluation."""
    eligible: bool
    cibilScore: int = Field(..., ge=0, le=900, description="Simulated score; 0 only when the PAN is rejected")
    maxEligibleAmount: int = Field(..., ge=0)
    message: str

    class Config:
        frozen = True

class ErrorResponse(BaseModel):
    error: str
    details: str

class LoanApplicationForm(BaseModel):
    """Raw form values as typed by the applicant, before any parsing."""
    name: Optional[str] = None
    loanAmount: Optional[str] = None
    mobileNumber: Optional[str] = None
    panNumber: Optional[str] = None
    monthlyIncome: Optional[str] = None

    # Numeric inputs may arrive as JSON numbers; treat them as their text form
    @field_validator("*", mode="before")
    @classmethod
    def _coerce_to_text(cls, value):
        if isinstance(value, bool):
            return str(value).lower()
        if isinstance(value, (int, float)):
            return str(value)
        return value

class FormValidationResult(BaseModel):
    valid: bool
    errors: Dict[str, str] = {}
    request: Optional[LoanRequest] = None
