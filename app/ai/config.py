import os
from dataclasses import dataclass


@dataclass(frozen=True)
class AIConfig:
    provider: str
    model: str
    temperature: float


def load_ai_config() -> AIConfig:
    provider = os.getenv("AI_PROVIDER", "openai").strip().lower()
    model = os.getenv("AI_MODEL", "gpt-4").strip()
    try:
        temperature = float(os.getenv("AI_TEMPERATURE", "0.7"))
    except ValueError:
        temperature = 0.7
    return AIConfig(provider=provider, model=model, temperature=temperature)
