from dataclasses import dataclass
from enum import Enum
from typing import Optional

class AIProvider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"

class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"

@dataclass
class AIConfig:
    enabled: bool
    provider: AIProvider
    api_key: str
    api_endpoint: Optional[str] = None # overrides the provider's default URL
    model: Optional[str] = None
    auto_delete: bool = False # drop marketing mail before it is stored

@dataclass
class AppSettings:
    notifications: bool = True
    ai_config: Optional[AIConfig] = None
    theme: Theme = Theme.SYSTEM

    @property
    def classification_enabled(self) -> bool:
        return self.ai_config is not None and self.ai_config.enabled
