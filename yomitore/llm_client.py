"""
Chat client for the model provider.

Speaks the OpenAI-compatible chat completions API (Groq by default) and
exposes the three calls the trainer needs: credential validation, practice
text generation and summary evaluation.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from yomitore.evaluation.parser import Field, FAIL_MARKERS, NO_MARKERS, PASS_MARKERS, YES_MARKERS
from yomitore.exceptions import ApiError, InvalidApiKeyError, NoChoicesError

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_ENDPOINT = "/chat/completions"
MODELS_ENDPOINT = "/models"

GENERATE_PROMPT = (
    "Write an original Japanese expository passage of about {count} characters "
    "on a topic of your choice. Output only the passage."
)

EVALUATE_PROMPT = """Does the summary below capture the original text appropriately?
Answer with exactly these lines and nothing else:

- {appropriateness}: {yes} or {no}
- {importance}: 1-5 (are the important points covered?)
- {conciseness}: 1-5 (is it free of padding?)
- {accuracy}: 1-5 (is it faithful to the original?)
- {improvement1}: one concrete suggestion
- {improvement2}: one concrete suggestion
- {improvement3}: one concrete suggestion
- {overall}: {pass_} or {fail}

# Original
{original}

# Summary
{summary}"""


def build_evaluation_prompt(original_text: str, summary_text: str) -> str:
    """Build the grading prompt asking for the bullet format the parser reads."""
    return EVALUATE_PROMPT.format(
        appropriateness=Field.APPROPRIATENESS.label,
        importance=Field.IMPORTANCE.label,
        conciseness=Field.CONCISENESS.label,
        accuracy=Field.ACCURACY.label,
        improvement1=Field.IMPROVEMENT1.label,
        improvement2=Field.IMPROVEMENT2.label,
        improvement3=Field.IMPROVEMENT3.label,
        overall=Field.OVERALL.label,
        yes=YES_MARKERS[0],
        no=NO_MARKERS[0],
        pass_=PASS_MARKERS[0],
        fail=FAIL_MARKERS[0],
        original=original_text,
        summary=summary_text,
    )


class ChatClient:
    """OpenAI-compatible chat completions client."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.groq.com/openai/v1",
        model: str = "openai/gpt-oss-120b",
        timeout: int = 60,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._session = session or requests.Session()

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def validate_credentials(self) -> None:
        """
        Check the API key against the models endpoint.

        Raises:
            InvalidApiKeyError: If the provider rejects the key.
            ApiError: If the request could not be made.
        """
        try:
            response = self._session.get(
                f"{self.base_url}{MODELS_ENDPOINT}",
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ApiError(f"API request failed: {e}", cause=e) from e

        if not response.ok:
            raise InvalidApiKeyError(response.status_code)

    def complete(self, prompt: str) -> str:
        """
        Send a single user message and return the reply text.

        Raises:
            ApiError: On transport failure or a non-success status.
            NoChoicesError: If the response has no choices.
        """
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
        }
        try:
            response = self._session.post(
                f"{self.base_url}{CHAT_COMPLETIONS_ENDPOINT}",
                headers=self._headers(),
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status in (401, 403):
                raise InvalidApiKeyError(status) from e
            raise ApiError(f"API request failed: {e}", status_code=status, cause=e) from e
        except requests.RequestException as e:
            raise ApiError(f"API request failed: {e}", cause=e) from e

        try:
            data = response.json()
        except ValueError as e:
            raise ApiError(f"Failed to parse API response: {e}", cause=e) from e

        choices = data.get("choices") or []
        if not choices:
            raise NoChoicesError()
        # content can be null in the provider's response
        content = (choices[0].get("message") or {}).get("content")
        return content or ""

    def generate_text(self, character_count: int) -> str:
        """Generate a practice passage of roughly ``character_count`` characters."""
        logger.info(f"Generating practice text ({character_count} chars)")
        return self.complete(GENERATE_PROMPT.format(count=character_count))

    def evaluate_summary(self, original_text: str, summary_text: str) -> str:
        """Ask the model to grade a summary. Returns the raw response text."""
        logger.info("Requesting summary evaluation")
        return self.complete(build_evaluation_prompt(original_text, summary_text))
