"""
Short AI-written notes about an album: what it is, where it came from and a
couple of fun facts, shown on a record's detail page.

The model is asked for strict JSON; anything it returns that does not parse
into `AlbumSummary` degrades to the all-"Unknown" summary instead of failing.
"""

import json

import openai
from loguru import logger
from openai import OpenAI
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from quincy.core.config import settings
from quincy.core.errors import UpstreamServiceError, ValidationError

SYSTEM_PROMPT = "You are a music historian. Respond with strict JSON only."

USER_PROMPT = (
    'Give a concise, factual summary for the album "{album}" by "{artist}". '
    'Return JSON with keys: "album_info" (1 sentence), "history" (1 sentence), '
    '"fun_facts" (array of 2-3 short bullets). If you are unsure about any '
    'detail, use "Unknown" instead of guessing.'
)


class AlbumSummary(BaseModel):
    album_info: str = "Unknown"
    history: str = "Unknown"
    fun_facts: list[str] = []


def parse_summary(content: str | None) -> AlbumSummary:
    if not content:
        return AlbumSummary()

    cleaned = content.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.removeprefix("```json").removeprefix("```")
        cleaned = cleaned.removesuffix("```").strip()

    try:
        return AlbumSummary.model_validate(json.loads(cleaned))
    except (json.JSONDecodeError, SchemaError) as e:
        logger.warning("Unparseable album summary ({}): {!r}", e.__class__.__name__, cleaned[:200])
        return AlbumSummary()


class AlbumSummaryService:
    def __init__(self, client=None):
        self.client = client

    def _get_client(self):
        if self.client is None:
            if not settings.OPENAI_API_KEY:
                raise UpstreamServiceError("OpenAI API key not configured on server")
            self.client = OpenAI(api_key=settings.OPENAI_API_KEY, timeout=settings.OPENAI_TIMEOUT_SECONDS)
        return self.client

    def summarize(self, album: str | None, artist: str | None) -> AlbumSummary:
        album = (album or "").strip()
        artist = (artist or "").strip()
        if not album or not artist:
            raise ValidationError("Album and artist are required")

        client = self._get_client()
        try:
            completion = client.chat.completions.create(
                model=settings.OPENAI_MODEL,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": USER_PROMPT.format(album=album, artist=artist)},
                ],
                temperature=0.4,
                max_tokens=220,
            )
        except openai.OpenAIError as e:
            logger.error("Album summary failed for {} / {}: {}", album, artist, e)
            raise UpstreamServiceError("OpenAI API error", error=e.__class__.__name__) from e

        if not completion.choices:
            return AlbumSummary()
        return parse_summary(completion.choices[0].message.content)
