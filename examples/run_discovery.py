#!/usr/bin/env python3
"""
Example: Run two discovery sequences and show how results accumulate.

This script demonstrates:
1. A first run that fills the in-memory repository
2. A second run whose duplicates are filtered against the first
3. Exporting the accumulated grants as JSON

Prerequisites:
    - Set environment variables:
        OPENAI_API_KEY=your_key
        MAIL_WEBHOOK_URL=https://mail.example.com/send   (optional)

Usage:
    python examples/run_discovery.py [recipient@example.com]
"""

import asyncio
import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from dotenv import load_dotenv

# Load environment variables
env_file = Path(__file__).parent.parent / '.env'
if env_file.exists():
    load_dotenv(env_file)

from grant_discovery.errors import GrantDiscoveryError
from grant_discovery.log_stream import LogStream
from grant_discovery.models.search_config import SearchConfig
from grant_discovery.pipeline import DiscoveryOrchestrator


async def print_entries(queue: asyncio.Queue) -> None:
    """Print progress entries as they arrive."""
    while True:
        entry = await queue.get()
        print(f"[{entry.timestamp:%H:%M:%S}] {entry.level.value:<7} {entry.message}")


async def main() -> None:
    recipient = sys.argv[1] if len(sys.argv) > 1 else ''

    log_stream = LogStream()
    printer = asyncio.create_task(print_entries(log_stream.subscribe()))
    orchestrator = DiscoveryOrchestrator.from_env(log_stream=log_stream)

    runs = [
        SearchConfig(
            keywords=['research funding', 'call for proposals'],
            email_recipient=recipient,
            notification_enabled=bool(recipient),
        ),
        SearchConfig(
            keywords=['tech innovation grant', 'research funding'],
            email_recipient=recipient,
            notification_enabled=bool(recipient),
        ),
    ]

    try:
        for i, config in enumerate(runs, 1):
            print(f"\n{'=' * 60}\nRUN {i}: {', '.join(config.keywords)}\n{'=' * 60}")
            log_stream.clear()
            try:
                result = await orchestrator.run(config)
            except GrantDiscoveryError as e:
                print(f"\nRun {i} aborted: {e.message}")
                continue
            await asyncio.sleep(0)

            print(f"\nNew: {result.new_count}  Filtered: {result.filtered_count}")
            for grant in result.new_grants:
                print(f"  - {grant.program_title} ({grant.agency_name}) [{grant.status.value}]")
    finally:
        printer.cancel()
        await orchestrator.extractor.openai_client.close()

    output = Path('grants_discovery_export.json')
    output.write_text(orchestrator.repository.export_json(), encoding='utf-8')
    print(f"\nExported {len(orchestrator.repository)} grants to {output}")


if __name__ == '__main__':
    asyncio.run(main())
