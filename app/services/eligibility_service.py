import logging
import math
import random
import re
from typing import Callable, Optional, Protocol, Tuple

from app import eligibility_policy as policy
from app.schemas.loan_schema import LoanRequest, EligibilityResult
from app.utils.masking import mask_pan

logger = logging.getLogger(__name__)

_PAN_RE = re.compile(policy.PAN_PATTERN)


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


RandomFactory = Callable[[], RandomSource]


# Validates the PAN format independently of any caller-side checks
def is_valid_pan_format(pan: Optional[str]) -> bool:
    return bool(pan) and _PAN_RE.fullmatch(pan) is not None


# Returns the base score for the applicant's monthly income bracket
def base_score_for_income(monthly_income: float) -> int:
    for lower_bound, score in policy.INCOME_BRACKETS:
        if monthly_income >= lower_bound:
            return score
    return policy.DEFAULT_BASE_SCORE


# Returns the score adjustment for a loan-to-annual-income ratio
def ratio_adjustment(loan_to_income_ratio: float) -> int:
    if loan_to_income_ratio > policy.HIGH_RATIO_THRESHOLD:
        return policy.HIGH_RATIO_PENALTY
    if loan_to_income_ratio > policy.ELEVATED_RATIO_THRESHOLD:
        return policy.ELEVATED_RATIO_PENALTY
    if loan_to_income_ratio < policy.LOW_RATIO_THRESHOLD:
        return policy.LOW_RATIO_BONUS
    return 0


def clamp_score(score: int) -> int:
    return max(policy.MIN_CIBIL_SCORE, min(policy.MAX_CIBIL_SCORE, score))


def calculate_cibil_score(monthly_income: float, loan_amount: float, rng: RandomSource) -> int:
    """
    Simulates a CIBIL score from income and loan size.

    The score is the income-bracket base, adjusted by the loan-to-income
    ratio, plus a uniform random term in [-20, 20], clamped to [300, 900].
    Identical inputs can produce different scores; pass a fixed ``rng`` to
    pin the result.
    """
    base_score = base_score_for_income(monthly_income)
    loan_to_income_ratio = loan_amount / (monthly_income * 12)
    adjustment = ratio_adjustment(loan_to_income_ratio)
    low, high = policy.RANDOM_ADJUSTMENT_RANGE
    random_adjustment = rng.randint(low, high)

    logger.debug(
        f"Score components: base={base_score}, ratio={loan_to_income_ratio:.2f}, "
        f"ratio_adjustment={adjustment}, random_adjustment={random_adjustment}"
    )
    return clamp_score(base_score + adjustment + random_adjustment)


# Returns the fraction of the requested amount allowed for a score, or 0.0 below every tier
def eligibility_percentage_for_score(cibil_score: int) -> float:
    for lower_bound, percentage in policy.SCORE_TIERS:
        if cibil_score >= lower_bound:
            return percentage
    return 0.0


def max_affordable_loan(monthly_income: float) -> float:
    return monthly_income * 12 * policy.AFFORDABILITY_INCOME_MULTIPLE


def compute_eligible_amount(loan_amount: float, monthly_income: float, cibil_score: int) -> Tuple[int, float]:
    """Returns (max eligible amount, effective percentage) after the affordability cap."""
    percentage = eligibility_percentage_for_score(cibil_score)
    max_eligible_amount = math.floor(loan_amount * percentage)

    affordable = max_affordable_loan(monthly_income)
    if max_eligible_amount > affordable:
        max_eligible_amount = math.floor(affordable)
        percentage = affordable / loan_amount

    return max_eligible_amount, percentage


# Rounds half up so 12.5% displays as 13%
def display_percentage(percentage: float) -> int:
    return math.floor(percentage * 100 + 0.5)


def build_approval_message(name: str, percentage: float) -> str:
    message = policy.MESSAGES["approved"].format(name=name)
    if percentage < 1.0:
        message += policy.MESSAGES["partial_amount"].format(percentage=display_percentage(percentage))
    else:
        message += policy.MESSAGES["full_amount"]
    return message


class EligibilityEvaluator:
    """
    Applies the lending policy to a single applicant.

    The evaluator holds no state beyond ``random_factory``, which is called
    once per evaluation to obtain a fresh random source. Production uses
    ``random.Random`` (seeded from the OS on construction); tests inject a
    factory that returns a fixed stub.
    """

    def __init__(self, random_factory: RandomFactory = random.Random):
        self.random_factory = random_factory

    def evaluate(self, request: LoanRequest) -> EligibilityResult:
        logger.info(f"Processing loan eligibility request: {request.masked_summary()}")

        if not is_valid_pan_format(request.panNumber):
            logger.warning(f"Invalid PAN format: {mask_pan(request.panNumber)}")
            return EligibilityResult(
                eligible=False,
                cibilScore=0,
                maxEligibleAmount=0,
                message=policy.MESSAGES["invalid_pan"]
            )

        cibil_score = calculate_cibil_score(
            request.monthlyIncome,
            request.loanAmount,
            self.random_factory()
        )
        logger.info(f"Final CIBIL score: {cibil_score}")

        return self.decide(request, cibil_score)

    # Applies the gates, tiers and affordability cap for an already computed score
    def decide(self, request: LoanRequest, cibil_score: int) -> EligibilityResult:
        if cibil_score < policy.MIN_ELIGIBLE_SCORE:
            logger.info("Rejected: CIBIL score too low")
            return EligibilityResult(
                eligible=False,
                cibilScore=cibil_score,
                maxEligibleAmount=0,
                message=policy.MESSAGES["low_score"]
            )

        if request.monthlyIncome < policy.MIN_MONTHLY_INCOME:
            logger.info("Rejected: Monthly income too low")
            return EligibilityResult(
                eligible=False,
                cibilScore=cibil_score,
                maxEligibleAmount=0,
                message=policy.MESSAGES["low_income"]
            )

        max_eligible_amount, percentage = compute_eligible_amount(
            request.loanAmount,
            request.monthlyIncome,
            cibil_score
        )

        logger.info(
            f"Approved: cibil_score={cibil_score}, max_eligible_amount={max_eligible_amount}, "
            f"eligibility_percentage={display_percentage(percentage)}%"
        )

        return EligibilityResult(
            eligible=True,
            cibilScore=cibil_score,
            maxEligibleAmount=max_eligible_amount,
            message=build_approval_message(request.name, percentage)
        )


# Builds a new evaluator per request; FastAPI tests override this dependency
def get_eligibility_evaluator() -> EligibilityEvaluator:
    return EligibilityEvaluator()
