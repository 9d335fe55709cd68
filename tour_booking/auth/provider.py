"""
Auth Provider - owns the current session and the operations around it.

One provider instance is created at application start and passed by
reference to every view that needs the current user. All operations
return an OperationResult; none of them raise on service or store errors.
"""

from typing import Any, Callable, List, Optional, Union

from tour_booking.api.destination_service import DestinationServiceClient
from tour_booking.api.enrichment import BookingEnricher, EnrichedItem, EnrichmentError
from tour_booking.api.exceptions import AuthenticationError, TourAPIError
from tour_booking.api.user_service import UserServiceClient
from tour_booking.domain.result import OperationResult
from tour_booking.domain.session import Role, Session, StoredSession
from tour_booking.utils.logger import get_logger, mask_email
from .exceptions import SessionStoreError
from .navigation import ADMIN_ROUTE, HOME_ROUTE, SIGNUP_ROUTE, Navigator
from .session_store import (
    DEFAULT_TTL_SECONDS,
    TOKEN_COOKIE,
    USER_ID_KEY,
    MemorySessionStore,
    SessionStore,
)

logger = get_logger(__name__)

Sink = Callable[[List[EnrichedItem]], None]
NavigationHandle = Union[Navigator, Callable[[str], None]]


class AuthProvider:
    """
    Session owner exposing login, logout, booking listing and removal.

    Attributes:
        user_client: Client for the user/booking service
        destination_client: Client for the destination service
        store: Persistence for the token cookie and user id
        navigator: Default navigation handle for redirects
        enricher: Fan-out used to resolve booking rows
        token_ttl_seconds: Lifetime of the token cookie written at login
    """

    def __init__(
        self,
        user_client: Optional[UserServiceClient] = None,
        destination_client: Optional[DestinationServiceClient] = None,
        store: Optional[SessionStore] = None,
        navigator: Optional[NavigationHandle] = None,
        enricher: Optional[BookingEnricher] = None,
        token_ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ):
        self.user_client = user_client or UserServiceClient()
        self.destination_client = destination_client or DestinationServiceClient()
        self.store = store if store is not None else MemorySessionStore()
        self.navigator = navigator if navigator is not None else Navigator()
        self.enricher = enricher or BookingEnricher(self.destination_client)
        self.token_ttl_seconds = token_ttl_seconds
        self._user: Optional[Session] = None

    @classmethod
    def from_settings(cls, settings, navigator: Optional[NavigationHandle] = None) -> "AuthProvider":
        """Wire clients, store and enricher from a Settings instance."""
        user_client = UserServiceClient(settings.user_service_url, timeout=settings.request_timeout)
        destination_client = DestinationServiceClient(
            settings.destination_service_url, timeout=settings.request_timeout
        )
        enricher = BookingEnricher(
            destination_client,
            max_workers=settings.enrichment_workers,
            policy=settings.enrichment_policy,
        )
        return cls(
            user_client=user_client,
            destination_client=destination_client,
            store=settings.build_session_store(),
            navigator=navigator,
            enricher=enricher,
            token_ttl_seconds=settings.token_ttl_seconds,
        )

    @property
    def user(self) -> Optional[Session]:
        """Current session, or None when logged out."""
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @staticmethod
    def _go(handle: NavigationHandle, path: str) -> None:
        if isinstance(handle, Navigator):
            handle.navigate(path)
        else:
            handle(path)

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    def login(self, email: str, password: str) -> OperationResult:
        """
        Check credentials and start a session.

        On success the token cookie and user id are persisted, the in-memory
        session is set, and the navigator is sent to /admin for ADMIN users
        or /home for everyone else. On failure nothing is written.
        """
        context = {"email_masked": mask_email(email)}

        try:
            signed_in = self.user_client.sign_in(email, password)
        except TourAPIError as e:
            message = e.server_message or str(e)
            error_code = "invalid_credentials" if isinstance(e, AuthenticationError) else (
                "http_error" if e.status_code is not None else "network_error"
            )
            logger.error("Login failed", operation="login", context=context, error=message)
            return OperationResult.fail(message, error_code, status_code=e.status_code)

        stored = StoredSession.issue(
            user_id=signed_in.user_id,
            token=signed_in.jwt,
            ttl_seconds=self.token_ttl_seconds,
            role=signed_in.role,
        )
        try:
            self.store.save(stored)
        except SessionStoreError as e:
            logger.error(
                "Login succeeded but session could not be persisted",
                operation="login",
                context=context,
                error=str(e),
            )
            return OperationResult.fail(str(e), "store_error")

        role = Role.parse(signed_in.role)
        self._user = Session(user_id=signed_in.user_id, role=role)
        logger.info(
            "User logged in",
            operation="login",
            context={**context, "user_id": signed_in.user_id, "role": role.value},
        )

        self._go(self.navigator, ADMIN_ROUTE if role is Role.ADMIN else HOME_ROUTE)

        return OperationResult.ok(
            {
                "jwt": signed_in.jwt,
                "user_id": signed_in.user_id,
                "user_role": signed_in.role,
            }
        )

    def logout(self, navigator: Optional[NavigationHandle] = None) -> OperationResult:
        """
        End the session regardless of prior state.

        Expires the token cookie, clears all persisted storage, nulls the
        in-memory session and redirects to /signup.
        """
        logger.info(
            "Logging out",
            operation="logout",
            context={"user_id": self._user.user_id if self._user else None},
        )
        store_error = None
        try:
            self.store.clear()
        except SessionStoreError as e:
            store_error = str(e)
            logger.warning("Failed to clear persisted session", operation="logout", error=store_error)

        self._user = None
        self._go(navigator if navigator is not None else self.navigator, SIGNUP_ROUTE)

        if store_error:
            return OperationResult.ok(None, store_warning=store_error)
        return OperationResult.ok()

    def fetch_user_bookings(self, sink: Optional[Sink] = None) -> OperationResult:
        """
        List the user's bookings and resolve each row's destination.

        Issues one listing request plus one lookup per row. The enriched
        list, in row order, is handed to ``sink`` and returned as data.
        Under the fail-fast policy a single failed lookup means the sink
        is not called.
        """
        operation = "fetch_user_bookings"

        try:
            user_id = self.store.get_item(USER_ID_KEY)
            token = self.store.get_cookie(TOKEN_COOKIE)
        except SessionStoreError as e:
            logger.error("Cannot read persisted session", operation=operation, error=str(e))
            return OperationResult.fail(str(e), "store_error")

        if not user_id or not token:
            logger.warning(
                "No persisted session; skipping bookings fetch",
                operation=operation,
                context={"has_user_id": bool(user_id), "has_token": bool(token)},
            )
            return OperationResult.fail("Not logged in", "not_authenticated")

        try:
            rows = self.user_client.get_user_bookings(user_id, token)
            bookings = self.enricher.enrich(rows)
        except EnrichmentError as e:
            return OperationResult.fail(str(e), "enrichment_failed", row_index=e.index)
        except AuthenticationError as e:
            logger.error("Bookings request rejected", operation=operation, error=str(e))
            return OperationResult.fail(str(e), "not_authenticated", status_code=e.status_code)
        except TourAPIError as e:
            logger.error(
                "Bookings request failed",
                operation=operation,
                context={"user_id": user_id},
                error=str(e),
            )
            return OperationResult.fail(str(e), "http_error", status_code=e.status_code)

        if sink is not None:
            sink(bookings)

        logger.info(
            f"Delivered {len(bookings)} bookings",
            operation=operation,
            context={"user_id": user_id},
        )
        return OperationResult.ok(bookings)

    def remove_booking(self, booking_id: Any) -> OperationResult:
        """Delete a booking and report the service's answer."""
        try:
            response = self.destination_client.remove_booking(booking_id)
        except TourAPIError as e:
            logger.error(
                "Failed to remove booking",
                operation="remove_booking",
                context={"booking_id": booking_id},
                error=str(e),
            )
            return OperationResult.fail(str(e), "http_error", status_code=e.status_code)

        logger.info("Booking removed", operation="remove_booking", context={"booking_id": booking_id})
        return OperationResult.ok(response)

    def restore_session(self) -> OperationResult:
        """
        Rebuild the in-memory session from the store.

        Never called implicitly; the application decides whether a persisted
        token should resume a session after a restart.
        """
        try:
            stored = self.store.load()
        except SessionStoreError as e:
            logger.error("Cannot read persisted session", operation="restore_session", error=str(e))
            return OperationResult.fail(str(e), "store_error")

        if stored is None or stored.is_expired():
            return OperationResult.fail("No persisted session", "not_authenticated")

        self._user = Session(user_id=stored.user_id, role=Role.parse(stored.role))
        logger.info(
            "Session restored",
            operation="restore_session",
            context={"user_id": stored.user_id, "role": self._user.role.value},
        )
        return OperationResult.ok(self._user)
