"""
Payment SMS helpers: amount/phone extraction for callers and the phone
normalization the matcher compares with.
"""
from dataclasses import dataclass
from typing import Optional
import re

COUNTRY_PREFIX = "+91"

_AMOUNT_PATTERN = re.compile(r"Rs\.?\s*(\d+(?:\.\d+)?)\s+Credited", re.IGNORECASE)
_PHONE_PATTERN = re.compile(r"by\s+(\d{10})", re.IGNORECASE)


@dataclass(frozen=True)
class PaymentNotice:
    amount: float
    phone: str


def parse_sms_text(sms_text: str) -> Optional[PaymentNotice]:
    """Extract amount and sender phone from 'Rs.<amount> Credited ... by <10 digits>'"""
    if not sms_text:
        return None

    amount_match = _AMOUNT_PATTERN.search(sms_text)
    phone_match = _PHONE_PATTERN.search(sms_text)
    if not amount_match or not phone_match:
        return None

    return PaymentNotice(amount=float(amount_match.group(1)), phone=phone_match.group(1))


def normalize_phone(phone: str) -> str:
    """Drop whitespace and a leading +91 so both stored and incoming numbers compare equal"""
    digits = "".join((phone or "").split())
    if digits.startswith(COUNTRY_PREFIX):
        digits = digits[len(COUNTRY_PREFIX):]
    return digits


def phone_variants(phone: str) -> list:
    """Stored representations that count as the same number"""
    bare = normalize_phone(phone)
    return [bare, f"{COUNTRY_PREFIX}{bare}"]


def format_amount(amount: float) -> str:
    if float(amount).is_integer():
        return str(int(amount))
    return f"{amount:.2f}"
