"""
External service clients for the Grant Discovery pipeline.
"""

from .openai_client import OpenAIClient, SearchCompletion
from .mail_client import MailClient, SendResult

__all__ = [
    'OpenAIClient',
    'SearchCompletion',
    'MailClient',
    'SendResult',
]
