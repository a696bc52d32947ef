"""LLM-backed semantic task search: the expensive escalation path.

Sends the numbered task corpus to a chat model and asks it to pick the tasks
that match the user's intent. Used by SearchService only when fuzzy matching
is weak or semantic search is forced.
"""

import json
import logging
import time
from typing import Any

from task_search.application.interfaces.chat_provider import ChatProvider
from task_search.application.interfaces.semantic_search_provider import SemanticSearchProvider
from task_search.domain.entities import ChatMessage, SemanticMatch, Task
from task_search.domain.exceptions import SemanticSearchError

logger = logging.getLogger(__name__)

_MAX_CONTENT_CHARS = 200
_DEFAULT_SCORE = 0.5

_SYSTEM_PROMPT = """\
You are a task search assistant for a personal to-do list.

Given the user's search query and a numbered list of tasks, pick the tasks
the user is most likely looking for. Users misremember wording, use
nicknames, paraphrase and make typos, so match on intent, not exact words.

## Response Format (strict JSON, no markdown)

{
  "matches": [
    {"taskIndex": 0, "relevanceScore": 0.9, "reasoning": "short explanation"}
  ],
  "interpretation": "what the user is looking for"
}

relevanceScore is between 0 and 1. Return at most {limit} matches, best first.
Return an empty matches list when nothing fits.
Respond ONLY with valid JSON.
"""


class LLMSemanticSearchProvider(SemanticSearchProvider):
    """SemanticSearchProvider that asks a chat model to rank tasks."""

    def __init__(
        self,
        chat_provider: ChatProvider,
        *,
        model: str = "",
        max_tokens: int = 1024,
    ):
        self._chat_provider = chat_provider
        self._model = model
        self._max_tokens = max_tokens

    @property
    def provider_name(self) -> str:
        return f"llm:{self._chat_provider.provider_name}"

    async def semantic_search(
        self,
        query: str,
        corpus: list[Task],
        limit: int,
    ) -> list[SemanticMatch]:
        if not corpus:
            return []

        messages = [
            ChatMessage(
                role="system",
                content=_SYSTEM_PROMPT.replace("{limit}", str(limit)),
            ),
            ChatMessage(
                role="user",
                content=f"Query: {json.dumps(query, ensure_ascii=False)}\n\n"
                f"Tasks:\n{self._format_corpus(corpus)}",
            ),
        ]

        start = time.monotonic()
        result = await self._chat_provider.complete(
            messages=messages,
            model=self._model,
            temperature=0.1,
            max_tokens=self._max_tokens,
        )
        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "Semantic search LLM call: model=%s tokens=%d %dms",
            result.model or self._model,
            result.usage.total_tokens,
            duration_ms,
        )

        matches = self._parse_matches(result.content, corpus)
        return matches[:limit]

    # ── Private helpers ──────────────────────────────────────────────

    @staticmethod
    def _format_corpus(corpus: list[Task]) -> str:
        lines = []
        for index, task in enumerate(corpus):
            line = f"[{index}] {task.content[:_MAX_CONTENT_CHARS]}"
            if task.description:
                line += f" — {task.description[:_MAX_CONTENT_CHARS]}"
            if task.category:
                line += f" (category: {task.category})"
            lines.append(line)
        return "\n".join(lines)

    def _parse_matches(self, llm_response: str, corpus: list[Task]) -> list[SemanticMatch]:
        """Parse the LLM's JSON into matches, resolving indices to task ids."""
        data = self._load_json(llm_response)
        raw_matches = data.get("matches")
        if not isinstance(raw_matches, list):
            raise SemanticSearchError(self.provider_name, "response has no 'matches' list")

        ids = {task.id for task in corpus}
        matches: list[SemanticMatch] = []
        seen: set[str] = set()
        for item in raw_matches:
            if not isinstance(item, dict):
                continue
            task_id = self._resolve_task_id(item, corpus, ids)
            if task_id is None or task_id in seen:
                continue
            seen.add(task_id)
            matches.append(
                SemanticMatch(
                    task_id=task_id,
                    score=_coerce_score(item.get("relevanceScore")),
                    reasoning=str(item.get("reasoning") or ""),
                )
            )

        matches.sort(key=lambda m: m.score, reverse=True)
        return matches

    @staticmethod
    def _resolve_task_id(item: dict[str, Any], corpus: list[Task], ids: set[str]) -> str | None:
        task_id = item.get("taskId")
        if task_id is not None and str(task_id) in ids:
            return str(task_id)
        index = item.get("taskIndex")
        if isinstance(index, int) and 0 <= index < len(corpus):
            return corpus[index].id
        logger.debug("Ignoring semantic match with unknown task reference: %s", item)
        return None

    def _load_json(self, llm_response: str) -> dict[str, Any]:
        # Strip potential markdown fences
        text = (llm_response or "").strip()
        if text.startswith("```"):
            lines = text.split("\n")
            text = "\n".join(lines[1:-1] if len(lines) > 2 else lines[1:]).strip()

        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            start = text.find("{")
            end = text.rfind("}")
            if start == -1 or end <= start:
                raise SemanticSearchError(
                    self.provider_name, f"could not parse response as JSON: {text[:200]!r}"
                ) from None
            try:
                data = json.loads(text[start : end + 1])
            except json.JSONDecodeError as exc:
                raise SemanticSearchError(
                    self.provider_name, f"could not parse response as JSON: {exc}"
                ) from exc

        if not isinstance(data, dict):
            raise SemanticSearchError(self.provider_name, "response JSON is not an object")
        return data


def _coerce_score(raw: Any) -> float:
    try:
        score = float(raw)
    except (TypeError, ValueError):
        return _DEFAULT_SCORE
    return min(1.0, max(0.0, score))
