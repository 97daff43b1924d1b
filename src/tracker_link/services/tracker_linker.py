import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from .registry import TrackerRegistry, KeywordEntry
from .reference_matcher import ReferenceMatcher, ReferenceMatch, DEFAULT_LINK_TEMPLATE
from ..exceptions import TrackerLinkError

logger = logging.getLogger('tracker_link')


@dataclass
class LinkResult:
    """
    Outcome of a fallible linker operation.

    Exactly one of value and error is meaningful: on success ``error`` is
    None, on failure ``value`` is None and ``error`` holds the exception.
    """
    value: Any = None
    error: Optional[TrackerLinkError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def errstr(self) -> str:
        return str(self.error) if self.error else ''

    def __bool__(self) -> bool:
        return self.ok


class TrackerLinker:
    """
    Turns tracker references such as 'Bug #1234' or '#1234' into links.

    Constructor arguments follow the positional shorthand:

    - ``TrackerLinker()``: no searches
    - ``TrackerLinker(url)``: default search only
    - ``TrackerLinker(keyword, url)``: one keyword search, also used as the default
    - ``TrackerLinker(k1, url1, k2, url2, ...)``: several keyword searches, no default

    The constructor and the mutating methods raise TrackerLinkError
    subclasses. The ``new`` and ``try_*`` variants never raise; they return a
    LinkResult and remember the error message for ``errstr()``.
    """

    def __init__(self, *args: str, allow_https: bool = False,
                 link_template: str = DEFAULT_LINK_TEMPLATE):
        self.registry = TrackerRegistry.from_args(*args, allow_https=allow_https)
        self.matcher = ReferenceMatcher(self.registry, link_template=link_template)
        self._last_error: Optional[TrackerLinkError] = None

        logger.debug(
            "TrackerLinker initialized with %d keyword(s), default: %s",
            len(self.registry), self.registry.get_default()
        )

    @classmethod
    def new(cls, *args: str, **kwargs) -> LinkResult:
        """Construct a linker, returning a LinkResult instead of raising."""
        try:
            return LinkResult(value=cls(*args, **kwargs))
        except TrackerLinkError as e:
            logger.warning("Could not create tracker linker: %s", e)
            return LinkResult(error=e)

    # Registry access

    def keywords(self) -> List[str]:
        return self.registry.keywords()

    def keyword(self, keyword: str) -> Optional[str]:
        return self.registry.keyword(keyword)

    def add_keyword(self, keyword: str, url_template: str) -> KeywordEntry:
        return self.registry.add_keyword(keyword, url_template)

    def remove_keyword(self, keyword: str) -> KeywordEntry:
        return self.registry.remove_keyword(keyword)

    def default(self) -> Optional[str]:
        return self.registry.get_default()

    def set_default(self, url_template: str) -> str:
        return self.registry.set_default(url_template)

    def set_default_keyword(self, keyword: str) -> str:
        return self.registry.set_default_keyword(keyword)

    # Processing

    def process(self, text: str) -> str:
        return self.matcher.process(text)

    def find_references(self, text: str) -> List[ReferenceMatch]:
        return self.matcher.find_references(text)

    # Non-raising variants

    def _attempt(self, operation: Callable[..., Any], *args: Any) -> LinkResult:
        try:
            return LinkResult(value=operation(*args))
        except TrackerLinkError as e:
            logger.warning("%s failed: %s", operation.__name__, e)
            self._last_error = e
            return LinkResult(error=e)

    def try_keyword(self, keyword: str, url_template: str) -> LinkResult:
        return self._attempt(self.add_keyword, keyword, url_template)

    def try_default(self, url_template: str) -> LinkResult:
        return self._attempt(self.set_default, url_template)

    def try_default_keyword(self, keyword: str) -> LinkResult:
        return self._attempt(self.set_default_keyword, keyword)

    def try_process(self, text: str) -> LinkResult:
        return self._attempt(self.process, text)

    def errstr(self) -> str:
        """Message of the most recent error captured by a try_* call on this linker."""
        return str(self._last_error) if self._last_error else ''
