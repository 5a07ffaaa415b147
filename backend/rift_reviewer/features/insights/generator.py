"""
Insight generator backed by Amazon Bedrock.

The generator is a black box to the rest of the service: it receives a
structured payload and answers with an ``Insight`` (or a list of
``TimelineInsight``). Anything that cannot be validated into those shapes
raises ``InsightGenerationError``.
"""

import json
from typing import Any, Dict, List, Optional, Protocol

import aioboto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import TypeAdapter, ValidationError

from rift_reviewer.core.exceptions import InsightGenerationError

from .schemas import Insight, TimelineInsight

logger = structlog.get_logger(__name__)

PLAYER_PROMPT = (
    "You are a League of Legends coach. Analyze the player's aggregate statistics "
    "and recent matches. Answer with a single JSON object with the keys "
    '"severity" ("no-issue", "info" or "warning"), "summary" (a few words) and '
    '"analysis" (a short paragraph).'
)

MATCH_PROMPT = (
    "You are a League of Legends coach. Analyze this player's performance in one "
    "match. Answer with a single JSON object with the keys "
    '"severity" ("no-issue", "info" or "warning"), "summary" (a few words) and '
    '"analysis" (a short paragraph).'
)

TIMELINE_PROMPT = (
    "You are a League of Legends coach. Review the match timeline and point out "
    "the key moments. Answer with a JSON array of objects with the keys "
    '"timestamp" (milliseconds), "severity" ("info" or "warning"), "summary" '
    'and "analysis".'
)

_timeline_adapter = TypeAdapter(List[TimelineInsight])


class InsightGenerator(Protocol):
    """Opaque AI collaborator."""

    async def generate_player_insights(self, stats: Dict[str, Any]) -> Insight:
        ...

    async def generate_match_insights(self, match_stats: Dict[str, Any]) -> Insight:
        ...

    async def generate_timeline_insights(
        self, timeline: Dict[str, Any]
    ) -> List[TimelineInsight]:
        ...


def extract_json(text: str) -> Any:
    """Decode the first JSON value in a model answer, ignoring code fences."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
        cleaned = cleaned.strip()

    starts = [i for i in (cleaned.find("{"), cleaned.find("[")) if i >= 0]
    if not starts:
        raise InsightGenerationError("Model answer contains no JSON")

    try:
        value, _ = json.JSONDecoder().raw_decode(cleaned[min(starts):])
    except ValueError as e:
        raise InsightGenerationError(f"Model answer is not valid JSON: {e}") from e
    return value


class BedrockInsightGenerator:
    """Insight generator calling the Bedrock Converse API through aioboto3."""

    def __init__(
        self,
        model_id: str,
        region_name: Optional[str] = None,
        max_tokens: int = 1024,
        temperature: float = 0.3,
    ):
        self.model_id = model_id
        self.region_name = region_name
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._session: Optional[aioboto3.Session] = None

    def _get_client(self):
        """Get an aioboto3 bedrock-runtime client context manager."""
        if self._session is None:
            self._session = aioboto3.Session()
        return self._session.client("bedrock-runtime", region_name=self.region_name)

    async def _converse(self, system_prompt: str, payload: Dict[str, Any]) -> str:
        try:
            async with self._get_client() as client:
                response = await client.converse(
                    modelId=self.model_id,
                    system=[{"text": system_prompt}],
                    messages=[
                        {
                            "role": "user",
                            "content": [{"text": json.dumps(payload, default=str)}],
                        }
                    ],
                    inferenceConfig={
                        "maxTokens": self.max_tokens,
                        "temperature": self.temperature,
                    },
                )
        except (ClientError, BotoCoreError) as e:
            logger.warning("bedrock_call_failed", model_id=self.model_id, error=str(e))
            raise InsightGenerationError(f"Bedrock call failed: {e}") from e

        try:
            blocks = response["output"]["message"]["content"]
        except (KeyError, TypeError) as e:
            raise InsightGenerationError("Bedrock response has no message") from e

        text = "".join(block.get("text", "") for block in blocks)
        logger.debug(
            "bedrock_answer_received",
            model_id=self.model_id,
            stop_reason=response.get("stopReason"),
            length=len(text),
        )
        return text

    async def _single(self, system_prompt: str, payload: Dict[str, Any]) -> Insight:
        value = extract_json(await self._converse(system_prompt, payload))
        try:
            return Insight.model_validate(value)
        except ValidationError as e:
            raise InsightGenerationError(f"Unusable insight: {e.error_count()} errors") from e

    async def generate_player_insights(self, stats: Dict[str, Any]) -> Insight:
        return await self._single(PLAYER_PROMPT, stats)

    async def generate_match_insights(self, match_stats: Dict[str, Any]) -> Insight:
        return await self._single(MATCH_PROMPT, match_stats)

    async def generate_timeline_insights(
        self, timeline: Dict[str, Any]
    ) -> List[TimelineInsight]:
        value = extract_json(await self._converse(TIMELINE_PROMPT, timeline))
        if isinstance(value, dict):
            value = value.get("insights", [value])
        try:
            return _timeline_adapter.validate_python(value)
        except ValidationError as e:
            raise InsightGenerationError(
                f"Unusable timeline insights: {e.error_count()} errors"
            ) from e
