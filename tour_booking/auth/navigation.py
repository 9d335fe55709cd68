"""
Navigation handle used by the auth provider for post-login/logout redirects.
"""

from typing import Callable, List, Optional

from tour_booking.utils.logger import get_logger

logger = get_logger(__name__)

ADMIN_ROUTE = "/admin"
HOME_ROUTE = "/home"
SIGNUP_ROUTE = "/signup"


class Navigator:
    """
    Records the current route and forwards changes to an optional listener.

    Attributes:
        history: Every route navigated to, oldest first
    """

    def __init__(self, on_navigate: Optional[Callable[[str], None]] = None):
        self.on_navigate = on_navigate
        self.history: List[str] = []

    @property
    def current(self) -> Optional[str]:
        return self.history[-1] if self.history else None

    def navigate(self, path: str) -> None:
        logger.debug("Navigating", operation="navigate", context={"path": path})
        self.history.append(path)
        if self.on_navigate is not None:
            self.on_navigate(path)

    def __call__(self, path: str) -> None:
        self.navigate(path)
