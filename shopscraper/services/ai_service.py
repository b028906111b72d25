"""
Wrapper for the AI extraction oracle (DeepSeek or any OpenAI-compatible API).
Includes timeout, response validation, error translation.
All AI/LLM calls are isolated here.
"""
import aiohttp
import asyncio
import json
from typing import Dict, Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from shopscraper.errors import ExtractionError
from shopscraper.config import config
from shopscraper.logger import logger
from shopscraper.sentry import capture_extraction_error


T = TypeVar("T", bound=BaseModel)


SYSTEM_PROMPT = """You extract structured data from the visible text of a web page.

Rules:
1. Reply with a single JSON object and nothing else
2. The object must validate against the JSON schema given by the user
3. Copy values as they appear on the page; do not invent data
4. Omit optional fields that the page does not show
"""


class ExtractionService:
    """
    Maps an instruction and an expected shape to populated data.
    Business logic never calls the AI API directly.
    """

    def __init__(self):
        self.api_key = config.DEEPSEEK_API_KEY
        self.base_url = config.AI_BASE_URL.rstrip("/")
        self.model = config.AI_MODEL
        self.max_page_chars = config.MAX_PAGE_CHARS
        self.session: Optional[aiohttp.ClientSession] = None
        self.is_available = bool(self.api_key)

    async def initialize(self):
        """Initialize HTTP session (called after startup)."""
        if not self.is_available:
            logger.warning("AI extraction service not configured")
            return

        self.session = aiohttp.ClientSession(
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json"
            },
            timeout=aiohttp.ClientTimeout(total=config.REQUEST_TIMEOUT)
        )
        logger.info(f"AI extraction service initialized with model: {self.model}")

    async def close(self):
        """Close HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def extract(self, instruction: str, schema: Type[T], page_text: str,
                      url: str = "") -> T:
        """
        Extract data shaped like `schema` from page text.

        Args:
            instruction: Natural-language description of what to extract
            schema: Pydantic model describing the expected result
            page_text: Visible text of the page
            url: Page URL, passed to the model as context

        Returns:
            Validated instance of `schema`

        Raises:
            ExtractionError: If the call fails or the reply does not match the shape
        """
        if self.session is None:
            raise ExtractionError("AI extraction service not initialized")

        payload = {
            "model": self.model,
            "messages": self._build_messages(instruction, schema, page_text, url),
            "temperature": 0.0,
            "response_format": {"type": "json_object"},
            "stream": False
        }

        try:
            content = await self._chat_completion(payload)
            data = self._parse_json(content)
            result = schema.model_validate(data)

        except ExtractionError as e:
            capture_extraction_error(url, schema.__name__, str(e))
            raise
        except ValidationError as e:
            capture_extraction_error(url, schema.__name__, str(e))
            raise ExtractionError(
                f"Extraction result does not match {schema.__name__}: {e}"
            ) from e
        except aiohttp.ClientError as e:
            raise ExtractionError(f"Network error calling AI API: {str(e)}") from e
        except asyncio.TimeoutError as e:
            raise ExtractionError(f"Timeout calling AI API: {str(e)}") from e

        logger.info(f"Extracted {schema.__name__} from {url or 'page'}")
        return result

    async def _chat_completion(self, payload: Dict[str, Any]) -> str:
        """Send the chat completion request and return the message content."""
        async with self.session.post(f"{self.base_url}/chat/completions", json=payload) as response:
            if response.status != 200:
                error_text = await response.text()
                raise ExtractionError(f"AI API error {response.status}: {error_text}")

            try:
                result = await response.json()
            except (aiohttp.ContentTypeError, json.JSONDecodeError) as e:
                raise ExtractionError(f"Invalid JSON response from AI API: {str(e)}") from e

        if not isinstance(result, dict) or not result.get("choices"):
            raise ExtractionError("Invalid response format from AI API")

        usage = result.get("usage", {})
        logger.debug(f"AI extraction tokens: {usage.get('total_tokens', 0)}")
        try:
            return result["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise ExtractionError("Invalid response format from AI API") from e

    def _build_messages(self, instruction: str, schema: Type[BaseModel],
                        page_text: str, url: str) -> List[Dict[str, str]]:
        """Prepare system and user messages for an extraction call."""
        text = page_text[:self.max_page_chars]
        user_prompt = (
            f"Instruction: {instruction}\n\n"
            f"JSON schema:\n{json.dumps(schema.model_json_schema())}\n\n"
            f"Page URL: {url}\n\n"
            f"Page text:\n{text}"
        )
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user_prompt}
        ]

    @staticmethod
    def _parse_json(content: str) -> Any:
        """Parse the model reply, tolerating a markdown code fence."""
        text = content.strip()
        if text.startswith("```") and "\n" in text:
            text = text.split("\n", 1)[1].rsplit("```", 1)[0].strip()

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ExtractionError(f"AI reply is not valid JSON: {str(e)}") from e
