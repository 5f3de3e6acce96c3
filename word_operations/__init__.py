"""
Word Operations Module

Store operations layered on the supervised Redis connection:
- store_word: write one word/definition pair into the words hash
- list_words: read the whole hash as a word -> definition mapping
- A single automatic retry for operations cut off by a reconnection
"""

from .manager import WordStore, DEFAULT_HASH_KEY
from .retry import retry_on_reconnect

__all__ = [
    'WordStore',
    'DEFAULT_HASH_KEY',
    'retry_on_reconnect',
]
