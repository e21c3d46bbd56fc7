"""
Grant discovery prompt.

The provider runs with web search enabled, which rules out native structured
output, so the prompt spells out the JSON schema and the parser recovers the
array from whatever text comes back.
"""

DISCOVERY_INSTRUCTIONS = """You are an autonomous grant discovery bot.
You search the live web and report funding opportunities as structured data.
You only report opportunities you found in search results, never invented ones."""


GRANT_SCHEMA_TEMPLATE = """{
  "agency_name": "Name of the funding agency",
  "program_title": "Title of the grant program",
  "funding_type": "e.g. Research, Project, Fellowship",
  "brief_description": "A concise summary (max 200 chars)",
  "eligibility_criteria": "Who can apply?",
  "application_deadline": "ISO date string (YYYY-MM-DD) or 'Rolling' or null if unknown",
  "funding_amount": "e.g. $50,000 - $100,000, or null if unknown",
  "geographic_scope": "e.g. National, Global, specific region",
  "official_application_link": "URL to the application page",
  "status": "OPEN" or "UPCOMING" or "UNKNOWN"
}"""


def build_discovery_prompt(keywords: list[str], year: int) -> str:
    """
    Build the discovery request for a keyword set and target year.

    Args:
        keywords: Search keywords, joined in the given order
        year: Funding cycle year

    Returns:
        Prompt text for the search-augmented provider
    """
    return f"""Your goal is to find OPEN or UPCOMING grant opportunities for the year {year}.

Keywords to search: {', '.join(keywords)}.

STEP 1: SEARCH
Use web search to find official agency pages, government funding notices, and reputable foundation calls for proposals.
Focus on finding high-quality, relevant results.

STEP 2: EXTRACT
From the search results, extract at least 5-8 distinct grant opportunities.
Ignore blogs, news articles, or expired grants unless they have a confirmed upcoming cycle.

STEP 3: FORMAT
Return the data strictly as a JSON array of objects.
The JSON structure for each object must be:
{GRANT_SCHEMA_TEMPLATE}

CRITICAL:
- Return ONLY the JSON array.
- Do not include markdown formatting (like ```json).
- Ensure the "official_application_link" comes from the search grounding data."""
