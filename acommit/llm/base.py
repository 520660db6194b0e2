"""LLM Base Classes and Shared Code"""

import http.client
import json
import re
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Optional

from acommit import COMMIT_TYPE_NAMES
from acommit.prompts import SYSTEM_INSTRUCTION

TYPES_PATTERN = '|'.join(COMMIT_TYPE_NAMES)

_CONVENTIONAL_RE = re.compile(rf'^({TYPES_PATTERN})(\([^)]+\))?!?: \S')
_FENCE_RE = re.compile(r'^\s*```')
_JUNK_RE = re.compile(r'^(diff --git |@@\s|[+-]{3}\s[ab]/|index [0-9a-f]|\s*```)')
_QUOTES = '"\'`'


class LLMError(Exception):
    """Raised when a provider can't produce a commit message."""
    pass


class NetworkError(LLMError):
    """The endpoint could not be reached or the connection dropped."""
    pass


class AuthError(LLMError):
    """Credentials are missing or were rejected."""
    pass


class ProviderError(LLMError):
    """Non-2xx status or a response that isn't the expected JSON."""
    pass


class EmptyResponseError(LLMError):
    """The provider answered, but with no usable text."""
    pass


@dataclass
class LLMResponse:
    """Cleaned commit message plus what the provider reported."""
    content: str
    model: str = ""
    tokens_used: int = 0
    raw: str = ""


@dataclass
class Completion:
    """Raw text pulled out of a provider response body."""
    text: str
    tokens_used: int = 0
    extra: dict = field(default_factory=dict)


def clean_commit_message(text: str) -> str:
    """Reduce a model reply to the commit message itself.

    Drops markdown fences and chatty preambles ("Here's a commit
    message:"), stops at trailing diff or code blocks, and strips quotes
    wrapped around the whole message.
    """
    if not text:
        return ""
    lines = text.strip().split('\n')
    # Only a fence wrapped around the whole reply is unwrapped; any other
    # fence after the message starts a code block and ends the message.
    if _FENCE_RE.match(lines[0]):
        lines = lines[1:]
        if lines and _FENCE_RE.match(lines[-1]):
            lines = lines[:-1]

    start = 0
    for i, line in enumerate(lines):
        if re.match(rf'^[`"\'\s]*({TYPES_PATTERN})[\(!:]', line):
            start = i
            break
    else:
        while start < len(lines) and not lines[start].strip():
            start += 1

    end = len(lines)
    for i in range(start + 1, len(lines)):
        if _JUNK_RE.match(lines[i]):
            end = i
            break

    message = '\n'.join(lines[start:end]).strip()
    while len(message) >= 2 and message[0] in _QUOTES and message[-1] == message[0]:
        message = message[1:-1].strip()
    return message


def is_conventional(message: str) -> bool:
    """Does the first line look like ``type(scope): description``?"""
    first_line = message.strip().split('\n')[0] if message else ""
    return bool(_CONVENTIONAL_RE.match(first_line))


class LLMClient(ABC):
    """Abstract base for provider clients.

    Subclasses implement ``_complete``; ``generate`` applies the shared
    cleaning and empty-response check so every provider behaves the same.
    """

    DEFAULT_TIMEOUT = 120

    def __init__(self, model: str, url: str, timeout: int | None = None,
                 trace: Optional[Callable[[str], None]] = None):
        self.model = model
        self.url = url.rstrip('/')
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self._trace = trace

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def _complete(self, prompt: str) -> Completion:
        """Send one request and pull the raw text out of the response."""
        pass

    def generate(self, prompt: str) -> LLMResponse:
        completion = self._complete(prompt)
        content = clean_commit_message(completion.text)
        if not content:
            raise EmptyResponseError(f"{self.name} returned no usable commit message")
        return LLMResponse(
            content=content,
            model=self.model,
            tokens_used=completion.tokens_used,
            raw=completion.text,
        )

    def trace(self, message: str) -> None:
        if self._trace:
            self._trace(message)

    def _post_json(self, url: str, payload: dict, headers: dict | None = None) -> dict:
        """POST a JSON body and decode the JSON reply."""
        data = json.dumps(payload).encode('utf-8')
        req = urllib.request.Request(
            url,
            data=data,
            headers={"Content-Type": "application/json", **(headers or {})},
            method="POST",
        )
        self.trace(f"POST {url}\n{json.dumps(payload, indent=2)}")

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                status = response.status
                body = response.read().decode('utf-8', errors='replace')
        except urllib.error.HTTPError as e:
            detail = e.read().decode('utf-8', errors='replace') if e.fp else ""
            self.trace(f"HTTP {e.code}\n{detail}")
            raise self._http_error(e.code, e.reason, detail) from e
        except urllib.error.URLError as e:
            if isinstance(e.reason, TimeoutError):
                raise NetworkError(f"{self.name} timed out after {self.timeout}s") from e
            raise NetworkError(f"Could not reach {self.name} at {self.url}: {e.reason}") from e
        except TimeoutError as e:
            raise NetworkError(f"{self.name} timed out after {self.timeout}s") from e
        except http.client.HTTPException as e:
            raise NetworkError(f"Incomplete response from {self.name}: {e}") from e
        except OSError as e:
            raise NetworkError(f"Connection to {self.name} lost: {e}") from e

        self.trace(f"HTTP {status}\n{body}")
        try:
            result = json.loads(body)
        except json.JSONDecodeError as e:
            raise ProviderError(f"{self.name} returned invalid JSON") from e
        if not isinstance(result, dict):
            raise ProviderError(f"{self.name} returned an unexpected response")
        return result

    def _http_error(self, status: int, reason: str, detail: str) -> LLMError:
        """Map a non-2xx status to an error. Providers refine this."""
        if status in (401, 403):
            return AuthError(f"{self.name} rejected the credentials ({status} {reason})")
        message = f"{self.name} request failed: {status} {reason}"
        snippet = detail.strip()[:300]
        if snippet:
            message += f"\n{snippet}"
        return ProviderError(message)


__all__ = [
    "LLMClient",
    "LLMResponse",
    "Completion",
    "LLMError",
    "NetworkError",
    "AuthError",
    "ProviderError",
    "EmptyResponseError",
    "SYSTEM_INSTRUCTION",
    "clean_commit_message",
    "is_conventional",
]
