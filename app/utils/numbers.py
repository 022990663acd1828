import math
import re

# Plain decimal literals only: optional sign, digits with an optional fraction, optional exponent
DECIMAL_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$", re.ASCII)


# Parses numeric text; blank text parses as 0, anything else unparseable or non-finite as NaN
def parse_number(text: str) -> float:
    text = text.strip()
    if not text:
        return 0.0
    if not DECIMAL_RE.fullmatch(text):
        return math.nan
    value = float(text)
    if not math.isfinite(value):
        return math.nan
    return value
