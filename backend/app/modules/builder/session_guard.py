"""
Text Labs Session Guard - single-flight canvas session creation

Every generation request needs a Text Labs canvas session. Requests for the
same presentation can arrive together, and only one session may be created
for them. The first caller starts the creation as a shared task; everyone
else awaits that task and receives the same identifier or the same error.

Usage:
    registry = SessionGuardRegistry(create_session=textlabs.create_session_id, timeout=30)

    guard = registry.get(f"{user_id}:{presentation_id}")
    session_id = await guard.ensure_session()   # at most one creation request

    guard.reset_session()                        # presentation switched
    await registry.close()                       # shutdown
"""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

from app.core.exceptions import SessionCreationError
from app.core.logging_config import logger


SessionFactory = Callable[[], Awaitable[str]]


class SessionState(str, Enum):
    IDLE = "idle"
    CREATING = "creating"
    CREATED = "created"
    FAILED = "failed"


class SessionGuard:
    """
    Holds the Text Labs session for one presentation.

    - A held identifier is returned without a network call
    - While a creation is in flight, callers share it
    - A failed creation is reported to every waiting caller; the next
      ensure_session() call starts a new attempt
    - Cancelling one waiting caller does not cancel the shared creation
    """

    def __init__(self, create_session: SessionFactory, timeout: Optional[float] = None, name: str = ""):
        self._create_session = create_session
        self._timeout = timeout
        self.name = name

        self._session_id: Optional[str] = None
        self._error: Optional[SessionCreationError] = None
        self._task: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    @property
    def error(self) -> Optional[SessionCreationError]:
        """Last creation failure, kept for display until the next attempt or reset"""
        return self._error

    @property
    def state(self) -> SessionState:
        if self._session_id is not None:
            return SessionState.CREATED
        if self._task is not None and not self._task.done():
            return SessionState.CREATING
        if self._error is not None:
            return SessionState.FAILED
        return SessionState.IDLE

    @property
    def closed(self) -> bool:
        return self._closed

    async def ensure_session(self) -> str:
        if self._closed:
            raise SessionCreationError("Session guard is closed")

        if self._session_id is not None:
            return self._session_id

        if self._task is None:
            self._error = None
            self._task = asyncio.create_task(self._run_creation(), name=f"textlabs-session:{self.name}")
            self._task.add_done_callback(_consume_exception)
            logger.info(f"[TextLabs] Creating session for {self.name or 'builder'}")

        task = self._task
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            current = asyncio.current_task()
            # The shared task was cancelled by reset/close while this caller was still waiting
            if task.cancelled() and current is not None and not current.cancelling():
                raise SessionCreationError("Session creation was cancelled") from None
            raise

    async def _run_creation(self) -> str:
        try:
            if self._timeout is not None:
                session_id = await asyncio.wait_for(self._create_session(), self._timeout)
            else:
                session_id = await self._create_session()
        except asyncio.TimeoutError:
            raise self._record_failure(
                SessionCreationError(f"Session creation timed out after {self._timeout}s")
            ) from None
        except SessionCreationError as e:
            raise self._record_failure(e)
        except Exception as e:
            raise self._record_failure(SessionCreationError(str(e) or type(e).__name__)) from e

        if not session_id:
            raise self._record_failure(SessionCreationError("Session creation returned no session id"))

        # reset/close may have replaced this task after the factory returned
        if not self._owns_state():
            logger.info(f"[TextLabs] Discarding session {session_id} from a reset creation")
            raise SessionCreationError("Session creation was cancelled")

        self._session_id = session_id
        self._task = None
        logger.info(f"[TextLabs] Session created: {session_id}")
        return session_id

    def _owns_state(self) -> bool:
        return self._task is not None and asyncio.current_task() is self._task

    def _record_failure(self, error: SessionCreationError) -> SessionCreationError:
        if not self._owns_state():
            return SessionCreationError("Session creation was cancelled")
        self._error = error
        self._task = None
        logger.warning(f"[TextLabs] Session creation failed for {self.name or 'builder'}: {error.message}")
        return error

    def reset_session(self) -> None:
        """Forget the session. A creation still in flight is cancelled."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        self._session_id = None
        self._error = None

    async def close(self) -> None:
        """Owner teardown: cancel any in-flight creation and refuse further calls"""
        self._closed = True
        task = self._task
        self.reset_session()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)


def _consume_exception(task: asyncio.Task) -> None:
    # Followers may all have been cancelled; mark the error as retrieved
    if not task.cancelled():
        task.exception()


class SessionGuardRegistry:
    """One SessionGuard per key (user + presentation). Created once at startup."""

    def __init__(self, create_session: SessionFactory, timeout: Optional[float] = None):
        self._create_session = create_session
        self._timeout = timeout
        self._guards: Dict[str, SessionGuard] = {}

    def get(self, key: str) -> SessionGuard:
        guard = self._guards.get(key)
        if guard is None or guard.closed:
            guard = SessionGuard(self._create_session, timeout=self._timeout, name=key)
            self._guards[key] = guard
        return guard

    def peek(self, key: str) -> Optional[SessionGuard]:
        return self._guards.get(key)

    async def discard(self, key: str) -> None:
        guard = self._guards.pop(key, None)
        if guard is not None:
            await guard.close()

    async def close(self) -> None:
        guards, self._guards = list(self._guards.values()), {}
        for guard in guards:
            await guard.close()

    def __len__(self) -> int:
        return len(self._guards)
