"""Google Gemini Client"""

from acommit.llm.base import (
    LLMClient, Completion, LLMError, AuthError, ProviderError, EmptyResponseError, SYSTEM_INSTRUCTION,
)


class GeminiClient(LLMClient):
    """Gemini generateContent API. Requires an API key."""

    DEFAULT_MODEL = "gemini-2.5-flash-lite"
    DEFAULT_URL = "https://generativelanguage.googleapis.com/v1beta"
    TEMPERATURE = 0.4

    def __init__(self, api_key: str | None = None, model: str | None = None,
                 url: str | None = None, timeout: int | None = None, trace=None):
        super().__init__(model or self.DEFAULT_MODEL, url or self.DEFAULT_URL, timeout, trace)
        self.api_key = api_key
        if not self.api_key:
            raise AuthError(
                "No Gemini API key found. Provide one with:\n"
                "  --gemini-key KEY, the gemini.api_key config entry, or\n"
                "  export GEMINI_API_KEY='your-key-here'"
            )

    @property
    def name(self) -> str:
        return f"Gemini ({self.model})"

    def _complete(self, prompt: str) -> Completion:
        payload = {
            "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": self.TEMPERATURE},
        }
        # Key goes in a header so it never shows up in traced URLs
        result = self._post_json(
            f"{self.url}/models/{self.model}:generateContent",
            payload,
            headers={"x-goog-api-key": self.api_key},
        )

        candidates = result.get("candidates") or []
        if not isinstance(candidates, list):
            raise ProviderError("Gemini response has malformed 'candidates'")
        if not candidates:
            feedback = result.get("promptFeedback")
            reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
            if reason:
                raise EmptyResponseError(f"Gemini blocked the prompt ({reason})")
            raise EmptyResponseError("Gemini returned no candidates")

        usage = result.get("usageMetadata")
        tokens = usage.get("totalTokenCount", 0) if isinstance(usage, dict) else 0
        return Completion(text=self._candidate_text(candidates[0]), tokens_used=tokens)

    @staticmethod
    def _candidate_text(candidate) -> str:
        if not isinstance(candidate, dict):
            raise ProviderError("Gemini response has a malformed candidate")
        content = candidate.get("content") or {}
        if not isinstance(content, dict):
            raise ProviderError("Gemini response has malformed candidate content")
        parts = content.get("parts")
        if parts is None:
            return ""
        if not isinstance(parts, list):
            raise ProviderError("Gemini response has malformed content parts")
        texts = []
        for part in parts:
            if not isinstance(part, dict):
                raise ProviderError("Gemini response has a malformed content part")
            text = part.get("text", "")
            if not isinstance(text, str):
                raise ProviderError("Gemini response has a non-text 'text' field")
            texts.append(text)
        return "".join(texts)

    def _http_error(self, status: int, reason: str, detail: str) -> LLMError:
        # Gemini answers a bad key with 400 rather than 401
        if status == 400 and "API_KEY_INVALID" in detail:
            return AuthError("Gemini rejected the API key (API_KEY_INVALID)")
        if status == 404:
            return ProviderError(f"Gemini model '{self.model}' not found")
        return super()._http_error(status, reason, detail)
