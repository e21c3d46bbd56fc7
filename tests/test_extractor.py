"""
Tests for the grant extractor.

Unit tests mock the OpenAI client. The live test hits the actual OpenAI API
and requires OPENAI_API_KEY to be set.
Run with: pytest tests/test_extractor.py -v
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from grant_discovery.clients.openai_client import OpenAIClient, SearchCompletion
from grant_discovery.errors import ConfigError, ExtractionError, OpenAIRateLimitError
from grant_discovery.log_stream import LogLevel
from grant_discovery.models.extraction import GroundingSource
from grant_discovery.models.search_config import SearchConfig
from grant_discovery.pipeline.extractor import GrantExtractor
from grant_discovery.pipeline.parser import GrantResponseParser
from grant_discovery.prompts.discover_grants import DISCOVERY_INSTRUCTIONS


def _mock_openai(completion=None, side_effect=None, available=True):
    client = MagicMock()
    client.search_model = 'gpt-4.1-mini'
    client.is_available.return_value = available
    client.search_completion = AsyncMock(return_value=completion, side_effect=side_effect)
    return client


@pytest.fixture
def config():
    return SearchConfig(keywords=['AI', 'climate'], year=2026)


class TestGrantExtractor:
    @pytest.mark.asyncio
    async def test_returns_text_and_sources(self, log_stream, config):
        sources = [GroundingSource(title='NSF', url='https://www.nsf.gov/funding')]
        client = _mock_openai(SearchCompletion(text='[]', sources=sources))

        output = await GrantExtractor(client, log_stream).extract(config)

        assert output.raw_text == '[]'
        assert output.grounding_sources == sources

    @pytest.mark.asyncio
    async def test_prompt_carries_keywords_and_year(self, log_stream, config):
        client = _mock_openai(SearchCompletion(text='[]'))

        await GrantExtractor(client, log_stream, temperature=0.2).extract(config)

        kwargs = client.search_completion.call_args.kwargs
        assert 'AI, climate' in kwargs['prompt']
        assert '2026' in kwargs['prompt']
        assert kwargs['instructions'] == DISCOVERY_INSTRUCTIONS
        assert kwargs['temperature'] == 0.2

    @pytest.mark.asyncio
    async def test_progress_entries(self, log_stream, config):
        client = _mock_openai(SearchCompletion(text='[]'))

        await GrantExtractor(client, log_stream).extract(config)

        assert [e.message for e in log_stream.snapshot()] == [
            'Initializing grant discovery protocol.',
            'Target year: 2026',
            'Keywords: [AI, climate]',
            'Executing search query on the web index...',
            'Search complete. Processing results...',
        ]
        assert log_stream.snapshot()[-1].level == LogLevel.SUCCESS

    @pytest.mark.asyncio
    async def test_missing_key_fails_before_network(self, log_stream, config):
        client = _mock_openai(available=False)

        with pytest.raises(ConfigError):
            await GrantExtractor(client, log_stream).extract(config)

        client.search_completion.assert_not_called()

    @pytest.mark.asyncio
    async def test_real_client_without_key(self, log_stream, config):
        with pytest.raises(ExtractionError):
            await GrantExtractor(OpenAIClient(api_key=''), log_stream).extract(config)

    @pytest.mark.asyncio
    async def test_provider_failure_wrapped(self, log_stream, config):
        client = _mock_openai(side_effect=OpenAIRateLimitError('slow down'))

        with pytest.raises(ExtractionError) as exc_info:
            await GrantExtractor(client, log_stream).extract(config)

        assert 'slow down' in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, OpenAIRateLimitError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize('text', ['', '   \n'])
    async def test_empty_text_raises(self, log_stream, config, text):
        client = _mock_openai(SearchCompletion(text=text))

        with pytest.raises(ExtractionError) as exc_info:
            await GrantExtractor(client, log_stream).extract(config)

        assert exc_info.value.message == 'No response generated by the extraction provider'

    @pytest.mark.asyncio
    async def test_source_logging_capped(self, log_stream, config):
        sources = [
            GroundingSource(title=f"Source {i}", url=f"https://site{i}.org/page")
            for i in range(5)
        ]
        client = _mock_openai(SearchCompletion(text='[]', sources=sources))

        await GrantExtractor(client, log_stream).extract(config)

        messages = [e.message for e in log_stream.snapshot()]
        assert 'Accessed 5 unique sources for verification.' in messages
        crawled = [m for m in messages if m.startswith('Crawled:')]
        assert crawled == [
            'Crawled: Source 0 (site0.org)',
            'Crawled: Source 1 (site1.org)',
            'Crawled: Source 2 (site2.org)',
        ]

    @pytest.mark.asyncio
    async def test_untitled_source_logs_url(self, log_stream, config):
        sources = [GroundingSource(url='https://grants.gov/x')]
        client = _mock_openai(SearchCompletion(text='[]', sources=sources))

        await GrantExtractor(client, log_stream).extract(config)

        assert 'Crawled: https://grants.gov/x (grants.gov)' in [
            e.message for e in log_stream.snapshot()
        ]


class TestGrantExtractorLive:
    """End-to-end extraction and parse against the real provider."""

    @pytest.mark.asyncio
    async def test_discover_and_parse(self, openai_api_key: str, log_stream):
        client = OpenAIClient(api_key=openai_api_key)
        try:
            output = await GrantExtractor(client, log_stream).extract(
                SearchConfig(keywords=['research funding'])
            )
            grants = GrantResponseParser(log_stream).parse(output.raw_text)

            assert len(grants) >= 1
            for grant in grants:
                print(f"\n  - {grant.program_title} ({grant.agency_name})")
        finally:
            await client.close()
