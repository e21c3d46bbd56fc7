"""
OpenAI client wrapper for the Grant Discovery pipeline.

Handles:
- Search-augmented completions via the Responses API web_search tool
- Collection of URL citations as grounding sources
- Mapping of SDK exceptions into the pipeline's error hierarchy

Credentials are passed in explicitly. The underlying AsyncOpenAI client is
created lazily, so a client without a key can be constructed and checked
with is_available() before anything touches the network.
"""

from dataclasses import dataclass, field

import openai
from openai import AsyncOpenAI

from ..errors import wrap_openai_error
from ..models.extraction import GroundingSource

DEFAULT_SEARCH_MODEL = 'gpt-4.1-mini'


@dataclass
class SearchCompletion:
    """Raw provider output: free text plus the sources it cited."""

    text: str
    sources: list[GroundingSource] = field(default_factory=list)


class OpenAIClient:
    """
    Async OpenAI client for grounded (web search) completions.

    Configuration is explicit; see grant_discovery.config for the
    environment variables the host reads to build one:
    - api_key: OPENAI_API_KEY
    - search_model: OPENAI_SEARCH_MODEL (default: gpt-4.1-mini)
    """

    def __init__(
        self,
        api_key: str | None = None,
        search_model: str | None = None,
    ):
        """
        Initialize the OpenAI client.

        Args:
            api_key: OpenAI API key. May be empty; check is_available() before use.
            search_model: Model for grounded completions
        """
        self.api_key = api_key or ''
        self.search_model = search_model or DEFAULT_SEARCH_MODEL
        self._client: AsyncOpenAI | None = None

    def is_available(self) -> bool:
        """Check if an API key is configured."""
        return bool(self.api_key)

    def _get_client(self) -> AsyncOpenAI:
        """Lazy-load the SDK client."""
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def search_completion(
        self,
        prompt: str,
        instructions: str | None = None,
        model: str | None = None,
        temperature: float = 0.1,
    ) -> SearchCompletion:
        """
        Run a completion with the web_search tool enabled.

        Args:
            prompt: User prompt
            instructions: Optional system-level instructions
            model: Override the default search model
            temperature: Sampling temperature (low for factual extraction)

        Returns:
            SearchCompletion with the response text and cited sources

        Raises:
            OpenAIError: The SDK raised; wrapped with request context
        """
        try:
            response = await self._get_client().responses.create(
                model=model or self.search_model,
                instructions=instructions,
                input=prompt,
                tools=[{'type': 'web_search'}],
                temperature=temperature,
            )
        except openai.OpenAIError as e:
            raise wrap_openai_error(
                e, context={'model': model or self.search_model}
            ) from e

        return SearchCompletion(
            text=response.output_text or '',
            sources=_collect_sources(response),
        )

    async def close(self):
        """Close the client connection."""
        if self._client is not None:
            await self._client.close()
            self._client = None


def _collect_sources(response) -> list[GroundingSource]:
    """URL citations from message output, de-duplicated by URL, in order."""
    sources: list[GroundingSource] = []
    seen: set[str] = set()

    for item in response.output or []:
        if getattr(item, 'type', None) != 'message':
            continue
        for part in getattr(item, 'content', None) or []:
            for annotation in getattr(part, 'annotations', None) or []:
                if getattr(annotation, 'type', None) != 'url_citation':
                    continue
                url = getattr(annotation, 'url', None)
                if not url or url in seen:
                    continue
                seen.add(url)
                sources.append(
                    GroundingSource(title=getattr(annotation, 'title', None) or '', url=url)
                )

    return sources
