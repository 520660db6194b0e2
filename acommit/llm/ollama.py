"""Ollama Client for Local Models"""

from acommit.llm.base import LLMClient, Completion, LLMError, ProviderError, SYSTEM_INSTRUCTION


class OllamaClient(LLMClient):
    """Ollama /api/generate. No auth. Requires: ollama serve"""

    DEFAULT_MODEL = "llama3.2:3b"
    DEFAULT_URL = "http://localhost:11434"
    TEMPERATURE = 0.4

    def __init__(self, model: str | None = None, url: str | None = None,
                 timeout: int | None = None, trace=None):
        super().__init__(model or self.DEFAULT_MODEL, url or self.DEFAULT_URL, timeout, trace)

    @property
    def name(self) -> str:
        return f"Ollama ({self.model})"

    def _complete(self, prompt: str) -> Completion:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "system": SYSTEM_INSTRUCTION,
            "stream": False,
            "options": {"temperature": self.TEMPERATURE},
        }
        result = self._post_json(f"{self.url}/api/generate", payload)
        text = result.get("response")
        if not isinstance(text, str):
            raise ProviderError("Ollama response has no 'response' field")
        return Completion(text=text, tokens_used=result.get("eval_count", 0))

    def _http_error(self, status: int, reason: str, detail: str) -> LLMError:
        if status == 404:
            return ProviderError(f"Model '{self.model}' not found. Run: ollama pull {self.model}")
        return super()._http_error(status, reason, detail)
