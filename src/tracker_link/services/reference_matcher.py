import re
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Tuple

from .registry import TrackerRegistry, PLACEHOLDER
from ..exceptions import InputError

logger = logging.getLogger('tracker_link')

DEFAULT_LINK_TEMPLATE = "<a href='{url}'>{text}</a>"


@dataclass(frozen=True)
class ReferenceMatch:
    """A tracker reference found in a piece of text."""
    matched_text: str
    reference_id: str
    start: int
    end: int
    url: str
    keyword: Optional[str] = None

    @property
    def is_default(self) -> bool:
        return self.keyword is None


@lru_cache(maxsize=128)
def build_reference_pattern(keywords: Tuple[str, ...], with_default: bool) -> Optional[re.Pattern]:
    """
    Compile the combined search pattern for a keyword set.

    Keyword references and default references are alternatives of a single
    pattern, so one left-to-right scan never lets a default match reuse the
    '#123' part of a keyword reference. When both are present, a keyword
    directly followed by '#123' that is not itself a valid keyword reference
    ('bug#12', 'bigbug #12') is consumed by the 'excluded' alternative and
    left untouched.

    Args:
        keywords: Lower-cased keywords in lexicographic order
        with_default: Whether bare '#123' references should be matched

    Returns:
        Compiled case-insensitive ASCII pattern, or None when there is nothing to search for
    """
    alternatives = []
    names = '|'.join(re.escape(keyword) for keyword in keywords)

    if keywords:
        alternatives.append(rf'\b(?P<keyword>{names})\s+#?(?P<keyword_id>\d+)')

    if with_default:
        if keywords:
            alternatives.append(rf'(?P<excluded>(?:{names})\s*#\d+)')
        alternatives.append(r'#(?P<default_id>\d+)')

    if not alternatives:
        return None

    return re.compile('|'.join(alternatives), re.IGNORECASE | re.ASCII)


class ReferenceMatcher:
    """
    Finds tracker references in text and rewrites them into links.

    The matcher borrows its registry read-only; compiled patterns are cached
    per keyword set so registry changes are picked up on the next call.
    """

    def __init__(self, registry: TrackerRegistry, link_template: str = DEFAULT_LINK_TEMPLATE):
        self.registry = registry
        self.link_template = link_template

    def _pattern(self) -> Tuple[Optional[re.Pattern], Optional[str]]:
        default_url = self.registry.get_default()
        pattern = build_reference_pattern(tuple(self.registry.keywords()), default_url is not None)
        return pattern, default_url

    def _to_reference(self, match: re.Match, default_url: Optional[str]) -> Optional[ReferenceMatch]:
        groups = match.groupdict()
        if groups.get('keyword_id'):
            keyword = groups['keyword'].lower()
            reference_id = groups['keyword_id']
            template = self.registry.template_for(keyword)
        elif groups.get('default_id'):
            keyword = None
            reference_id = groups['default_id']
            template = default_url
        else:
            # 'excluded' alternative
            return None

        return ReferenceMatch(
            matched_text=match.group(0),
            reference_id=reference_id,
            start=match.start(),
            end=match.end(),
            url=self.substitute_id(template, reference_id),
            keyword=keyword,
        )

    @staticmethod
    def substitute_id(url_template: str, reference_id: str) -> str:
        """Replace every %n placeholder in a URL template with the reference id."""
        return url_template.replace(PLACEHOLDER, reference_id)

    def render_link(self, reference: ReferenceMatch) -> str:
        return self.link_template.format(url=reference.url, text=reference.matched_text)

    @staticmethod
    def _check_text(text: str) -> None:
        if text is None or not isinstance(text, str):
            raise InputError('You did not provide a string to process')

    def find_references(self, text: str) -> List[ReferenceMatch]:
        """
        Find all tracker references in text, in order of appearance.

        Raises:
            InputError: If text is missing or not a string
        """
        self._check_text(text)
        pattern, default_url = self._pattern()
        if pattern is None:
            return []

        references = []
        for match in pattern.finditer(text):
            reference = self._to_reference(match, default_url)
            if reference:
                references.append(reference)
        return references

    def process(self, text: str) -> str:
        """
        Rewrite every tracker reference in text into a link.

        Args:
            text: The text to scan

        Returns:
            The text with keyword and default references replaced by links

        Raises:
            InputError: If text is missing or not a string
        """
        self._check_text(text)
        pattern, default_url = self._pattern()
        if pattern is None:
            logger.debug("No keyword or default searches configured, text left unchanged")
            return text

        keyword_links = 0
        default_links = 0

        def replace_reference(match):
            nonlocal keyword_links, default_links
            reference = self._to_reference(match, default_url)
            if reference is None:
                return match.group(0)
            if reference.is_default:
                default_links += 1
            else:
                keyword_links += 1
            return self.render_link(reference)

        result = pattern.sub(replace_reference, text)
        logger.debug("Tracker links created: %d keyword, %d default", keyword_links, default_links)
        return result
