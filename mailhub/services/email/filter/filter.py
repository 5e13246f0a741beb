import logging
from typing import Optional

from .constants import CLASSIFICATION_PROMPT, BODY_PREVIEW_CHARS, NOTIFY_CATEGORIES
from .helpers import extract_verification_code, extract_verification_link, category_from_response

from mailhub.lib.shared.models.email import EmailMessage, EmailClassification
from mailhub.lib.shared.models.settings import AIConfig
from mailhub.lib.shared.providers.llm import ClassificationProvider, get_classification_provider

logger = logging.getLogger(__name__)

class EmailClassifier:
    def __init__(self, ai_config: Optional[AIConfig], provider: Optional[ClassificationProvider] = None, timeout: float = 30.0):
        self.ai_config = ai_config
        self.provider = provider
        if self.provider is None and self.enabled:
            self.provider = get_classification_provider(ai_config, timeout=timeout)

    @property
    def enabled(self) -> bool:
        return self.ai_config is not None and self.ai_config.enabled

    @staticmethod
    def build_prompt(subject: str, body: str) -> str:
        # str slicing counts code points, so a multi-byte character is never split
        return CLASSIFICATION_PROMPT.format(subject=subject or "", body=(body or "")[:BODY_PREVIEW_CHARS])

    def classify_email(self, email: EmailMessage) -> EmailClassification:
        """
        Categorizes an email and pulls out any verification code/link.
        Raises ProviderError when the provider can't be reached, the caller decides what to do with the email.
        """
        if not self.enabled:
            return EmailClassification.default()

        # Regex extraction is cheap and doesn't depend on the provider
        verification_code = extract_verification_code(email.body)
        verification_link = extract_verification_link(email.body)

        answer = self.provider.classify(self.build_prompt(email.subject, email.body))
        category = category_from_response(answer)
        logger.debug(f"Classified email {email.id} as {category.value} (answer: {answer!r})")

        return EmailClassification(
            category=category,
            verification_code=verification_code,
            verification_link=verification_link,
            should_notify=category in NOTIFY_CATEGORIES,
        )
