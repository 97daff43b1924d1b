import re
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..exceptions import ValidationError, KeywordNotFoundError

logger = logging.getLogger('tracker_link')

PLACEHOLDER = '%n'
MAX_KEYWORD_LENGTH = 32


@dataclass(frozen=True)
class KeywordEntry:
    """A keyword search and the tracker URL template it links to."""
    keyword: str
    url_template: str


class TrackerRegistry:
    """
    Holds the keyword searches and the default search of a linker.

    Keywords are stored lower-cased and iterated in lexicographic order. The
    default search is either an explicit URL template or an alias to one of
    the registered keywords; setting one form clears the other.
    """

    NON_WORD_PATTERN = re.compile(r'\W', re.ASCII)
    HTTP_URL_PATTERN = re.compile(r'^http://[\w.]+/')
    HTTP_OR_HTTPS_URL_PATTERN = re.compile(r'^https?://[\w.]+/')

    def __init__(self, allow_https: bool = False):
        self.allow_https = allow_https
        self._entries: Dict[str, KeywordEntry] = {}
        self._default_template: Optional[str] = None
        self._default_keyword: Optional[str] = None

    @classmethod
    def from_args(cls, *args: str, allow_https: bool = False) -> 'TrackerRegistry':
        """
        Build a registry from the positional constructor shorthand.

        Args:
            *args: Nothing, a single default URL, one keyword/URL pair, or
                several keyword/URL pairs

        Returns:
            Populated TrackerRegistry

        Raises:
            ValidationError: If any keyword or URL is invalid, or the argument
                count is odd and greater than one
        """
        registry = cls(allow_https=allow_https)

        if len(args) == 0:
            return registry

        if len(args) == 1:
            registry.set_default(args[0])
            return registry

        if len(args) % 2:
            raise ValidationError('Arguments must be in keyword/url pairs')

        pairs = [(args[i], args[i + 1]) for i in range(0, len(args), 2)]
        for keyword, url in pairs:
            try:
                registry.validate_keyword(keyword)
            except ValidationError as e:
                raise ValidationError(f"Invalid keyword '{keyword}': {e}")
            try:
                registry.validate_url(url)
            except ValidationError as e:
                raise ValidationError(f"Bad URL for keyword '{keyword}': {e}")
            registry.add_keyword(keyword, url)

        # With a single tracker, bare '#123' references go to it as well
        if len(pairs) == 1:
            registry.set_default_keyword(pairs[0][0])

        return registry

    def validate_keyword(self, keyword: str) -> str:
        """Check a keyword and return its stored (lower-cased) form."""
        if not keyword or not isinstance(keyword, str):
            raise ValidationError('You did not provide a keyword')
        if self.NON_WORD_PATTERN.search(keyword):
            raise ValidationError('Keyword contains non-word characters', {'keyword': keyword})
        if keyword[0].isdigit():
            raise ValidationError('Keyword cannot start with a number', {'keyword': keyword})
        if len(keyword) > MAX_KEYWORD_LENGTH:
            raise ValidationError(
                f'Keyword cannot be longer than {MAX_KEYWORD_LENGTH} characters',
                {'keyword': keyword}
            )
        return keyword.lower()

    def validate_url(self, url: str) -> str:
        """Check that a tracker URL template has an accepted shape and a %n placeholder."""
        if not url or not isinstance(url, str):
            raise ValidationError('You did not provide a tracker URL')
        pattern = self.HTTP_OR_HTTPS_URL_PATTERN if self.allow_https else self.HTTP_URL_PATTERN
        if not pattern.match(url):
            raise ValidationError('The tracker URL format appears to be invalid', {'url': url})
        if PLACEHOLDER not in url:
            raise ValidationError(
                f'The tracker URL does not contain a {PLACEHOLDER} placeholder', {'url': url}
            )
        return url

    def add_keyword(self, keyword: str, url_template: str) -> KeywordEntry:
        """
        Add a keyword search, replacing any existing one with the same keyword.

        Raises:
            ValidationError: If the keyword or URL template is invalid. The
                registry is left unchanged.
        """
        name = self.validate_keyword(keyword)
        url = self.validate_url(url_template)

        entry = KeywordEntry(keyword=name, url_template=url)
        if name in self._entries:
            logger.debug("Replacing keyword search '%s': %s", name, url)
        else:
            logger.debug("Adding keyword search '%s': %s", name, url)
        self._entries[name] = entry
        return entry

    def keyword(self, keyword: str) -> Optional[str]:
        """Return the URL template for a keyword, or None if it is not registered."""
        entry = self._entries.get(self.validate_keyword(keyword))
        return entry.url_template if entry else None

    def remove_keyword(self, keyword: str) -> KeywordEntry:
        """Remove a keyword search. A default aliased to it is cleared as well."""
        name = self.validate_keyword(keyword)
        if name not in self._entries:
            raise KeywordNotFoundError(name)

        if self._default_keyword == name:
            logger.debug("Clearing default search aliased to removed keyword '%s'", name)
            self._default_keyword = None
        return self._entries.pop(name)

    def set_default(self, url_template: str) -> str:
        """Set an explicit URL template for the default search."""
        url = self.validate_url(url_template)

        self._default_keyword = None
        self._default_template = url
        logger.debug("Default search set to %s", url)
        return url

    def set_default_keyword(self, keyword: str) -> str:
        """
        Make the default search follow an existing keyword search.

        Raises:
            ValidationError: If the keyword is malformed
            KeywordNotFoundError: If the keyword is not registered
        """
        name = self.validate_keyword(keyword)
        if name not in self._entries:
            raise KeywordNotFoundError(name)

        self._default_template = None
        self._default_keyword = name
        logger.debug("Default search aliased to keyword '%s'", name)
        return name

    def get_default(self) -> Optional[str]:
        """
        Resolve the default search URL template.

        Returns:
            The explicit default template, else the current template of the
            aliased keyword, else None
        """
        if self._default_template:
            return self._default_template
        if self._default_keyword:
            return self._entries[self._default_keyword].url_template
        return None

    @property
    def default_keyword(self) -> Optional[str]:
        """Keyword the default search is aliased to, if any."""
        return self._default_keyword

    def keywords(self) -> List[str]:
        """Registered keywords in lexicographic order."""
        return sorted(self._entries)

    def template_for(self, keyword: str) -> Optional[str]:
        """Look up the template of a stored (lower-cased) keyword without validating it."""
        entry = self._entries.get(keyword)
        return entry.url_template if entry else None

    def entries(self) -> List[KeywordEntry]:
        """Keyword entries in lexicographic keyword order."""
        return [self._entries[name] for name in self.keywords()]

    def has_keyword(self, keyword: str) -> bool:
        return isinstance(keyword, str) and keyword.lower() in self._entries

    def __contains__(self, keyword: str) -> bool:
        return self.has_keyword(keyword)

    def __len__(self) -> int:
        return len(self._entries)
