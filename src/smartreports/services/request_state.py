"""Per-operation request state tracking for a builder session.

Each remote operation kind (metadata, execute, export) has one
:class:`RequestState`. Starting a request hands out a token; only the holder
of the latest token may settle the state, so responses that arrive after a
newer request was started are recognised as stale and dropped.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from smartreports.core.exceptions import RequestInProgressError, SmartReportsException


class RequestKind(str, Enum):
    """Remote operations tracked by a session."""

    METADATA = "metadata"
    EXECUTE = "execute"
    EXPORT = "export"


class RequestStatus(str, Enum):
    """Lifecycle of one tracked request."""

    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


# Kinds that may not be started again while one is pending. A new metadata
# request supersedes the pending one instead.
EXCLUSIVE_KINDS = frozenset({RequestKind.EXECUTE, RequestKind.EXPORT})


@dataclass(frozen=True)
class RequestState:
    """Observable state of one operation kind."""

    status: RequestStatus = RequestStatus.IDLE
    error: Optional[SmartReportsException] = None
    token: int = 0

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING


class RequestTracker:
    """Holds the :class:`RequestState` of every kind and issues request tokens."""

    def __init__(self) -> None:
        self._states: dict[RequestKind, RequestState] = {kind: RequestState() for kind in RequestKind}
        self._counter = 0

    def state(self, kind: RequestKind | str) -> RequestState:
        return self._states[RequestKind(kind)]

    def begin(self, kind: RequestKind | str) -> int:
        """
        Mark a request of ``kind`` as pending.

        Returns:
            Token identifying this request

        Raises:
            RequestInProgressError: If an exclusive kind is already pending
        """
        kind = RequestKind(kind)
        if kind in EXCLUSIVE_KINDS and self._states[kind].is_pending:
            raise RequestInProgressError(kind.value)
        self._counter += 1
        self._states[kind] = RequestState(status=RequestStatus.PENDING, token=self._counter)
        return self._counter

    def is_current(self, kind: RequestKind | str, token: int) -> bool:
        """True when ``token`` belongs to the latest request of ``kind``."""
        return self._states[RequestKind(kind)].token == token

    def succeed(self, kind: RequestKind | str, token: int) -> bool:
        """Settle a request as successful; ignored (False) for stale tokens."""
        return self._settle(RequestKind(kind), token, RequestStatus.SUCCESS, None)

    def fail(self, kind: RequestKind | str, token: int, error: SmartReportsException) -> bool:
        """Settle a request as failed; ignored (False) for stale tokens."""
        return self._settle(RequestKind(kind), token, RequestStatus.ERROR, error)

    def release(self, kind: RequestKind | str, token: int) -> bool:
        """
        Return a request that was never settled to idle.

        Called when the caller gives up on a request (stale response, error
        outside the operation's own failure mode) so the kind is not left
        pending. Ignored (False) when ``token`` is stale or already settled.
        """
        kind = RequestKind(kind)
        state = self._states[kind]
        if state.token != token or not state.is_pending:
            return False
        self.reset(kind)
        return True

    def reset(self, kind: RequestKind | str) -> None:
        """Return a kind to idle and invalidate its outstanding token."""
        kind = RequestKind(kind)
        self._counter += 1
        self._states[kind] = RequestState(token=self._counter)

    def _settle(
        self,
        kind: RequestKind,
        token: int,
        status: RequestStatus,
        error: Optional[SmartReportsException],
    ) -> bool:
        if self._states[kind].token != token:
            return False
        self._states[kind] = RequestState(status=status, error=error, token=token)
        return True
