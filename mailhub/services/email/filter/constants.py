import re

from mailhub.lib.shared.models.email import Category

# Tried in order, the first capture wins.
# The bare 6-digit pattern also matches phone numbers, dates and order numbers.
VERIFICATION_CODE_PATTERNS = [
    re.compile(r"code[:：\s]+([A-Z0-9]{4,8})", re.IGNORECASE),
    re.compile(r"verification[:：\s]+([A-Z0-9]{4,8})", re.IGNORECASE),
    re.compile(r"([0-9]{4,8})\s+is\s+your\s+code", re.IGNORECASE),
    re.compile(r"\b([0-9]{6})\b"),
]

VERIFICATION_LINK_PATTERN = re.compile(
    r'https?://[^\s<>"]+(?:verify|confirm|activate|validation)[^\s<>"]*'
)

# Checked in order against the lower-cased provider answer
CATEGORY_KEYWORDS = [
    ("marketing", Category.MARKETING),
    ("important", Category.IMPORTANT),
    ("verification", Category.VERIFICATION),
]

NOTIFY_CATEGORIES = {Category.IMPORTANT, Category.VERIFICATION}

BODY_PREVIEW_CHARS = 500

CLASSIFICATION_PROMPT = (
    "Classify this email into one of these categories: marketing, important, verification, or normal.\n\n"
    "Subject: {subject}\n\n"
    "Body preview: {body}\n\n"
    "Respond with just the category name."
)
