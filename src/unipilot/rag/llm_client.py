"""LiteLLM client wrapper with retry and API key validation.

All completion calls in the answer pipeline route through this module.
LiteLLM's built-in retry is used (``num_retries``, exponential backoff).
"""

from __future__ import annotations

import os

import litellm

# Disable LiteLLM verbose logging unless explicitly enabled
litellm.suppress_debug_info = True
litellm.set_verbose = False  # type: ignore[assignment]


# ------------------------------------------------------------------
# Provider → env var mapping for API key validation
# ------------------------------------------------------------------

_PROVIDER_ENV: dict[str, str | None] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "azure": "AZURE_API_KEY",
    "cohere": "COHERE_API_KEY",
    "google": "GOOGLE_API_KEY",
    "mistral": "MISTRAL_API_KEY",
    "groq": "GROQ_API_KEY",
    "together_ai": "TOGETHERAI_API_KEY",
    "ollama": None,  # Local, no key required
    "ollama_chat": None,
}


def provider_env_var(model: str) -> str | None:
    """Return the env var holding the API key for *model*'s provider (None if keyless)."""
    provider = model.split("/")[0].lower() if "/" in model else "openai"
    return _PROVIDER_ENV.get(provider)


def validate_api_key(model: str) -> None:
    """Check that the required API key env var is set for *model*.

    Raises:
        EnvironmentError: If the required key is missing from environment.
    """
    env_var = provider_env_var(model)
    if env_var is None:
        return

    if not os.getenv(env_var):
        provider = model.split("/")[0] if "/" in model else "openai"
        raise EnvironmentError(
            f"API key not found for provider '{provider}'. "
            f"Set the {env_var} environment variable."
        )


def complete(
    model: str,
    messages: list[dict],
    max_tokens: int = 800,
    temperature: float = 0.3,
    num_retries: int = 2,
    timeout: float | None = None,
) -> str:
    """Call litellm.completion() with retry/backoff. Returns content string.

    Raises:
        litellm.exceptions.APIError: On persistent API failure after retries.
    """
    kwargs: dict = {}
    if timeout is not None:
        kwargs["timeout"] = timeout
    response = litellm.completion(
        model=model,
        messages=messages,
        max_tokens=max_tokens,
        temperature=temperature,
        num_retries=num_retries,
        **kwargs,
    )
    return response.choices[0].message.content or ""


class LiteLLMCompletionModel:
    """Completion model backed by LiteLLM: ``complete(system, user) -> text``."""

    def __init__(
        self,
        model: str = "openai/gpt-4o-mini",
        max_tokens: int = 800,
        temperature: float = 0.3,
        num_retries: int = 2,
        timeout: float | None = None,
    ) -> None:
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.num_retries = num_retries
        self.timeout = timeout

    def complete(self, system: str, user: str) -> str:
        return complete(
            self.model,
            [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            num_retries=self.num_retries,
            timeout=self.timeout,
        )
