# app/eligibility_policy.py

"""
Centralized catalog of the numeric lending policy used by the eligibility
evaluator. Brackets and tiers are ordered top-down; the first match wins.
Changing a threshold here does not require touching the service logic.
"""

PAN_PATTERN = r"^[A-Z]{5}[0-9]{4}[A-Z]$"

MIN_CIBIL_SCORE = 300
MAX_CIBIL_SCORE = 900

# (inclusive lower bound on monthly income, base score)
INCOME_BRACKETS = [
    (100000, 800),
    (75000, 750),
    (50000, 700),
    (30000, 650),
    (20000, 600),
]
DEFAULT_BASE_SCORE = 550

# Loan-to-income ratio adjustments (ratio = loan amount / annual income)
HIGH_RATIO_THRESHOLD = 3
HIGH_RATIO_PENALTY = -50
ELEVATED_RATIO_THRESHOLD = 2
ELEVATED_RATIO_PENALTY = -30
LOW_RATIO_THRESHOLD = 1
LOW_RATIO_BONUS = 20

# Simulated bureau variance, inclusive on both ends
RANDOM_ADJUSTMENT_RANGE = (-20, 20)

# Hard rejection gates, checked in this order
MIN_ELIGIBLE_SCORE = 600
MIN_MONTHLY_INCOME = 20000

# (inclusive lower bound on score, fraction of requested amount)
SCORE_TIERS = [
    (750, 1.0),
    (700, 0.9),
    (650, 0.75),
    (600, 0.5),
]

# Maximum loan as a multiple of annual income
AFFORDABILITY_INCOME_MULTIPLE = 5

MESSAGES = {
    "invalid_pan": "Invalid PAN number format. Please check and try again.",
    "low_score": (
        "Your credit score is below the minimum required threshold. "
        "Please improve your credit history and try again."
    ),
    "low_income": "Your monthly income does not meet the minimum requirement of ₹20,000.",
    "approved": "Congratulations {name}! You are eligible for a loan.",
    "partial_amount": " Based on your credit profile, you can receive up to {percentage}% of the requested amount.",
    "full_amount": " You qualify for the full requested amount!",
}
