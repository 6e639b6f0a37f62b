"""
Pytest configuration and shared fixtures for vcardlib tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from vcardlib.core import Card, Property, PropertyParameter  # noqa: E402


TWO_CARDS = (
    b'BEGIN:VCARD\r\nVERSION:3.0\r\nFN:A\r\nEND:VCARD\r\n'
    b'BEGIN:VCARD\r\nVERSION:3.0\r\nFN:B\r\nEND:VCARD'
)


@pytest.fixture
def two_cards_data() -> bytes:
    """Two minimal vCard 3.0 documents back to back."""
    return TWO_CARDS


@pytest.fixture
def contact() -> Card:
    """A card with a structured name, two phones and a multi-valued field."""
    return Card([
        Property('FN', 'John Smith'),
        Property('N', ['Smith', 'John', '', 'Mr.', '']),
        Property('TEL', '+1 555 0100', [PropertyParameter('TYPE', 'HOME')]),
        Property('TEL', '+1 555 0199', [PropertyParameter('TYPE', 'WORK')]),
        Property('CATEGORIES', ['friends', 'golf']),
        Property('NOTE', 'line one\nline two; with, separators'),
    ])
