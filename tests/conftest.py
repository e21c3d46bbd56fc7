"""
Pytest configuration and shared fixtures.

Key fixtures:
- openai_api_key: OpenAI API key from environment (live tests only)
- log_stream: Fresh progress log
- make_grant: Factory for Grant records
- grant_payload: Provider-style JSON elements for parser tests

Unit tests mock the OpenAI and mail clients; only tests that request
openai_api_key talk to the real provider, and they skip without a key.
"""

import os
import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

# Load environment variables
from dotenv import load_dotenv

env_file = Path(__file__).parent.parent / '.env'
if env_file.exists():
    load_dotenv(env_file)

from grant_discovery.log_stream import LogStream
from grant_discovery.models.grant import Grant, GrantStatus


@pytest.fixture
def openai_api_key() -> str:
    """Get OpenAI API key from environment."""
    key = os.getenv('OPENAI_API_KEY')
    if not key:
        pytest.skip('OPENAI_API_KEY not set')
    return key


@pytest.fixture
def log_stream() -> LogStream:
    """Empty progress log."""
    return LogStream()


@pytest.fixture
def make_grant():
    """Factory for Grant records with sensible defaults."""
    counter = {'n': 0}

    def _make(program_title: str, **overrides) -> Grant:
        counter['n'] += 1
        fields = {
            'id': f"grant_{counter['n']:03d}",
            'agency_name': 'National Science Foundation',
            'program_title': program_title,
            'funding_type': 'Research',
            'brief_description': 'Supports early-stage research.',
            'eligibility_criteria': 'Accredited universities',
            'application_deadline': '2026-03-01',
            'funding_amount': '$50,000 - $100,000',
            'geographic_scope': 'National',
            'official_application_link': 'https://www.nsf.gov/funding/example',
            'status': GrantStatus.OPEN,
            'confidence_score': 0.95,
        }
        fields.update(overrides)
        return Grant(**fields)

    return _make


@pytest.fixture
def grant_payload() -> list[dict]:
    """Three provider-style grant objects."""
    return [
        {
            'agency_name': 'National Science Foundation',
            'program_title': 'CAREER Program',
            'funding_type': 'Research',
            'brief_description': 'Faculty early career development awards.',
            'eligibility_criteria': 'Untenured assistant professors',
            'application_deadline': '2026-07-27',
            'funding_amount': '$400,000 - $500,000',
            'geographic_scope': 'National',
            'official_application_link': 'https://www.nsf.gov/funding/pgm_summ.jsp?pims_id=503214',
            'status': 'OPEN',
        },
        {
            'agency_name': 'European Innovation Council',
            'program_title': 'EIC Accelerator',
            'funding_type': 'Project',
            'brief_description': 'Grant and equity support for startups and SMEs.',
            'eligibility_criteria': 'SMEs established in EU member states',
            'application_deadline': None,
            'funding_amount': 'Up to EUR 2.5 million',
            'geographic_scope': 'European Union',
            'official_application_link': 'https://eic.ec.europa.eu/eic-funding-opportunities/eic-accelerator_en',
            'status': 'UPCOMING',
        },
        {
            'agency_name': 'Wellcome Trust',
            'program_title': 'Discovery Research Platforms',
            'funding_type': 'Research',
            'brief_description': 'Funding for shared research platforms.',
            'eligibility_criteria': 'Research organisations',
            'application_deadline': 'Rolling',
            'funding_amount': None,
            'geographic_scope': 'Global',
            'official_application_link': 'https://wellcome.org/grant-funding/schemes/discovery-research-platforms',
            'status': 'UNKNOWN',
        },
    ]
