"""AI code explanations via an OpenAI-compatible chat-completions API.

Explanations are cached on the post row; a new one is requested only when
none is stored yet or the caller forces a refresh.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.core.config import Settings
from codeshare.core.errors import BadGateway, ServiceUnavailable
from codeshare.core.logging import get_logger
from codeshare.models.post import Post

logger = get_logger(__name__)

_FALLBACK = "Unable to generate explanation"

PROMPT_TEMPLATE = """Explain the following {language} code in a clear, beginner-friendly way.
Include:
- What the code does
- Key concepts used
- Any potential improvements

Code:
```{language}
{code}
```

Keep the explanation concise (max 300 words)."""


@dataclass(frozen=True)
class Explanation:
    explanation: str
    cached: bool


class ExplanationService:
    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = settings.openai_api_key
        self.api_url = settings.openai_api_url
        self.model = settings.openai_model
        self.timeout = settings.openai_timeout
        self._transport = transport

    async def explain(
        self, db: AsyncSession, post: Post, force_refresh: bool = False
    ) -> Explanation:
        if post.ai_explanation and not force_refresh:
            return Explanation(explanation=post.ai_explanation, cached=True)

        if not self.api_key:
            raise ServiceUnavailable("AI service not configured")

        text = await self._complete(
            PROMPT_TEMPLATE.format(language=post.language, code=post.code)
        )

        post.ai_explanation = text
        await db.flush()
        logger.info("AI explanation generated", post_id=str(post.id), refresh=force_refresh)
        return Explanation(explanation=text, cached=False)

    async def _complete(self, prompt: str) -> str:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.api_url,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json={
                        "model": self.model,
                        "messages": [{"role": "user", "content": prompt}],
                        "max_tokens": 500,
                        "temperature": 0.7,
                    },
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("AI completion request failed", error=str(exc))
            raise BadGateway("AI service unavailable") from exc

        choices = data.get("choices") or []
        if not choices:
            return _FALLBACK
        return (choices[0].get("message") or {}).get("content") or _FALLBACK
