from typing import Optional


# Keeps the first two characters of a PAN visible and masks the rest
def mask_pan(pan: Optional[str]) -> str:
    if not pan:
        return "<missing>"
    return f"{pan[:2]}***"


# Masks all but the last two digits of a mobile number
def mask_mobile(mobile: Optional[str]) -> str:
    if not mobile:
        return "<missing>"
    if len(mobile) <= 2:
        return "*" * len(mobile)
    return "*" * (len(mobile) - 2) + mobile[-2:]
