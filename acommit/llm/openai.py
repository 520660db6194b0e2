"""OpenAI-compatible Chat Completions Client"""

from acommit.llm.base import LLMClient, Completion, ProviderError, SYSTEM_INSTRUCTION


class OpenAIClient(LLMClient):
    """Any server speaking /chat/completions. The API key is optional."""

    DEFAULT_MODEL = "gpt-3.5-turbo"
    DEFAULT_URL = "https://api.openai.com/v1"
    MAX_TOKENS = 100
    TEMPERATURE = 0.7

    def __init__(self, url: str | None = None, api_key: str | None = None,
                 model: str | None = None, timeout: int | None = None, trace=None):
        super().__init__(model or self.DEFAULT_MODEL, url or self.DEFAULT_URL, timeout, trace)
        self.api_key = api_key

    @property
    def name(self) -> str:
        return f"OpenAI-compatible ({self.model})"

    def _complete(self, prompt: str) -> Completion:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": self.MAX_TOKENS,
            "temperature": self.TEMPERATURE,
        }
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        result = self._post_json(f"{self.url}/chat/completions", payload, headers=headers)

        choices = result.get("choices")
        if not isinstance(choices, list):
            raise ProviderError("OpenAI-compatible response has no 'choices'")
        text = ""
        if choices:
            choice = choices[0]
            message = choice.get("message") if isinstance(choice, dict) else None
            if not isinstance(message, dict):
                raise ProviderError("OpenAI-compatible response has a malformed 'choices' entry")
            text = self._content_text(message.get("content"))
        usage = result.get("usage")
        tokens = usage.get("total_tokens", 0) if isinstance(usage, dict) else 0
        return Completion(text=text, tokens_used=tokens)

    @staticmethod
    def _content_text(content) -> str:
        """Message content is a string, or a list of typed parts on some servers."""
        if content is None:
            return ""
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            texts = []
            for part in content:
                if isinstance(part, str):
                    texts.append(part)
                elif isinstance(part, dict) and part.get("type", "text") == "text":
                    text = part.get("text")
                    if not isinstance(text, str):
                        raise ProviderError("OpenAI-compatible response has a malformed content part")
                    texts.append(text)
            return "".join(texts)
        raise ProviderError(f"OpenAI-compatible response has unexpected content ({type(content).__name__})")
