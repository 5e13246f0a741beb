import pytest

from mailhub.lib.shared.models.email import Category, EmailClassification
from mailhub.lib.shared.providers.llm import ProviderError, OpenAIProvider
from mailhub.services.email.filter.filter import EmailClassifier
from tests.factories import make_ai_config, make_email, FakeProvider

pytestmark = pytest.mark.offline

@pytest.mark.parametrize("ai_config", [None, make_ai_config(enabled=False)])
def test_disabled_classifier_returns_default_without_provider(ai_config):
    provider = FakeProvider(default="important")
    classifier = EmailClassifier(ai_config, provider=provider)
    email = make_email(subject="URGENT", body="Your code: ZX81AB https://x.com/verify/1")

    result = classifier.classify_email(email)

    assert result == EmailClassification(category=Category.NORMAL)
    assert result.verification_code is None
    assert result.verification_link is None
    assert result.should_notify is False
    assert provider.prompts == []

def test_disabled_classifier_does_not_build_provider():
    assert EmailClassifier(make_ai_config(enabled=False)).provider is None

def test_enabled_classifier_builds_configured_provider():
    classifier = EmailClassifier(make_ai_config(), timeout=5)
    assert isinstance(classifier.provider, OpenAIProvider)
    assert classifier.provider.timeout == 5

@pytest.mark.parametrize("answer, category, notify", [
    ("important", Category.IMPORTANT, True),
    ("Verification", Category.VERIFICATION, True),
    ("marketing", Category.MARKETING, False),
    ("normal", Category.NORMAL, False),
    ("I can't tell", Category.NORMAL, False),
])
def test_notify_follows_category(answer, category, notify):
    classifier = EmailClassifier(make_ai_config(), provider=FakeProvider(default=answer))
    result = classifier.classify_email(make_email())
    assert result.category == category
    assert result.should_notify is notify

def test_marketing_beats_important_in_answer():
    provider = FakeProvider(default="This looks like IMPORTANT marketing material")
    result = EmailClassifier(make_ai_config(), provider=provider).classify_email(make_email())
    assert result.category == Category.MARKETING
    assert result.should_notify is False

def test_extraction_runs_alongside_provider():
    email = make_email(
        subject="Confirm your account",
        body="Your code: QW12ER. Or click https://app.example.com/confirm?token=abc",
    )
    result = EmailClassifier(make_ai_config(), provider=FakeProvider(default="verification")).classify_email(email)
    assert result.verification_code == "QW12ER"
    assert result.verification_link == "https://app.example.com/confirm?token=abc"

def test_provider_error_propagates():
    classifier = EmailClassifier(make_ai_config(), provider=FakeProvider())
    with pytest.raises(ProviderError):
        classifier.classify_email(make_email(subject="offline"))

def test_prompt_uses_first_500_characters_only():
    provider = FakeProvider()
    body = "a" * 500 + "b" * 300
    EmailClassifier(make_ai_config(), provider=provider).classify_email(make_email(subject="Report", body=body))

    prompt = provider.prompts[0]
    assert "Subject: Report" in prompt
    assert "a" * 500 in prompt
    assert "b" not in prompt.split("Body preview: ")[1].split("\n")[0]

def test_prompt_truncation_with_multibyte_text():
    body = "é" * 499 + "😀" + "漢字" * 150
    prompt = EmailClassifier.build_prompt("Hi", body)
    preview = prompt.split("Body preview: ")[1].split("\n\n")[0]

    assert len(preview) == 500
    assert preview.endswith("😀")
    assert preview.encode("utf-8").decode("utf-8") == preview

def test_prompt_handles_short_and_empty_bodies():
    assert "Body preview: \n" in EmailClassifier.build_prompt("Hi", "")
    assert "Body preview: short\n" in EmailClassifier.build_prompt(None, "short")
