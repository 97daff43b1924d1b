"""
Automatic links from tracker references.

Finds references such as 'Bug #1234' or '#1234' in free-form text and turns
them into links to the matching issue tracker.
"""

from .exceptions import (
    TrackerLinkError,
    ValidationError,
    KeywordNotFoundError,
    InputError,
    ConfigurationError,
)
from .services.registry import TrackerRegistry, KeywordEntry
from .services.reference_matcher import ReferenceMatcher, ReferenceMatch
from .services.tracker_linker import TrackerLinker, LinkResult

__version__ = '0.5.0'

__all__ = [
    'TrackerLinker',
    'LinkResult',
    'TrackerRegistry',
    'KeywordEntry',
    'ReferenceMatcher',
    'ReferenceMatch',
    'TrackerLinkError',
    'ValidationError',
    'KeywordNotFoundError',
    'InputError',
    'ConfigurationError',
]
