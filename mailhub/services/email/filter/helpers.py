from typing import Optional

from mailhub.lib.shared.models.email import Category
from .constants import VERIFICATION_CODE_PATTERNS, VERIFICATION_LINK_PATTERN, CATEGORY_KEYWORDS

def extract_verification_code(text: str) -> Optional[str]:
    """Returns the first code found by the ordered patterns, or None"""
    for pattern in VERIFICATION_CODE_PATTERNS:
        match = pattern.search(text or "")
        if match and match.group(1):
            return match.group(1)
    return None

def extract_verification_link(text: str) -> Optional[str]:
    """Returns the first http(s) URL that looks like a verify/confirm/activate link"""
    match = VERIFICATION_LINK_PATTERN.search(text or "")
    return match.group(0) if match else None

def category_from_response(response: str) -> Category:
    answer = (response or "").lower()
    for keyword, category in CATEGORY_KEYWORDS:
        if keyword in answer:
            return category
    return Category.NORMAL
