"""
Base Driver - Abstract browser driver consumed by the engine
"""
from abc import ABC, abstractmethod
from typing import Any, List, NamedTuple, Optional, Sequence, Tuple

from ..errors import ElementNotFound
from ..models.observation import Geometry, Observation, PageMetrics


class Match(NamedTuple):
    """An element found through a selector fallback chain."""

    selector: str
    handle: Any
    observation: Observation


class BaseDriver(ABC):
    """
    Abstract browser driver.

    Implementations wrap exactly one isolated browsing context. Every wait
    takes an explicit timeout and raises DriverTimeout when it expires;
    missing elements raise ElementNotFound; a dead page raises
    DriverUnavailable.
    """

    @abstractmethod
    async def navigate(self, path: str, timeout_ms: Optional[int] = None):
        """Navigate to a path relative to the application base URL."""

    @abstractmethod
    async def settle(self, timeout_ms: Optional[int] = None):
        """Wait for the page to go network-idle."""

    @abstractmethod
    async def locate(self, selector: str) -> Any:
        """Return a handle for the first element matching selector."""

    @abstractmethod
    async def locate_all(self, selector: str) -> List[Any]:
        """Return handles for every element matching selector."""

    @abstractmethod
    async def observe_geometry(self, handle: Any) -> Optional[Geometry]:
        """Bounding box of an element, None when it has no layout box."""

    @abstractmethod
    async def is_visible(self, handle: Any) -> bool:
        """Whether the element is rendered and visible."""

    @abstractmethod
    async def text_of(self, handle: Any) -> Optional[str]:
        """Trimmed text content of an element."""

    @abstractmethod
    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """Evaluate a script in the page."""

    @abstractmethod
    async def wait_for(self, selectors: Sequence[str], timeout_ms: int) -> str:
        """Wait until any selector is visible; return the one that matched."""

    @abstractmethod
    async def fill(self, handle: Any, text: str):
        """Type text into an input."""

    @abstractmethod
    async def click(self, handle: Any):
        """Click an element."""

    @abstractmethod
    async def screenshot(self, path: str, full_page: bool = False) -> str:
        """Save a screenshot and return its path."""

    @abstractmethod
    async def content(self) -> str:
        """Current DOM serialized as HTML."""

    @abstractmethod
    def current_url(self) -> str:
        """URL the page ended up on, after any redirects."""

    @abstractmethod
    def viewport(self) -> Tuple[int, int]:
        """Viewport width and height."""

    @abstractmethod
    async def page_metrics(self) -> PageMetrics:
        """Document scroll size against the viewport."""

    @abstractmethod
    async def grid_column_count(self, selectors: Sequence[str]) -> Optional[int]:
        """Rendered column count of the first visible grid, None if no grid."""

    @abstractmethod
    async def stop(self):
        """Close the browsing context."""

    async def match_first(self, selectors: Sequence[str]) -> Optional[Match]:
        """
        Walk a selector fallback chain.

        Selectors are tried in order and every element they match is
        observed. The first visible element wins; without one, the first
        hidden match is returned.

        Args:
            selectors: Fallback chain, most specific first

        Returns:
            Match, or None when no selector matches anything
        """
        hidden: Optional[Match] = None
        for selector in selectors:
            try:
                handles = await self.locate_all(selector)
            except ElementNotFound:
                continue
            for handle in handles:
                match = Match(selector, handle, await self._observe_handle(selector, handle))
                if match.observation.visible:
                    return match
                if hidden is None:
                    hidden = match
        return hidden

    async def locate_first_matching(self, selectors: Sequence[str]) -> Any:
        """
        Locate an element through a fallback chain.

        Raises:
            ElementNotFound: when no selector matches
        """
        match = await self.match_first(selectors)
        if match is None:
            raise ElementNotFound(list(selectors))
        return match.handle

    async def observe(self, selectors: Sequence[str]) -> Optional[Observation]:
        """Observe the element match_first picks; None when nothing matches."""
        match = await self.match_first(selectors)
        return match.observation if match is not None else None

    async def observe_all(self, selector: str, visible_only: bool = False) -> List[Observation]:
        """Observe every element matching selector."""
        try:
            handles = await self.locate_all(selector)
        except ElementNotFound:
            return []
        observations = [await self._observe_handle(selector, h) for h in handles]
        if visible_only:
            return [o for o in observations if o.visible]
        return observations

    async def _observe_handle(self, selector: str, handle: Any) -> Observation:
        width, height = self.viewport()
        visible = await self.is_visible(handle)
        return Observation(
            selector=selector,
            geometry=await self.observe_geometry(handle) if visible else None,
            visible=visible,
            viewport_width=width,
            viewport_height=height,
            text=await self.text_of(handle),
        )
