"""Sequential lead-region annotation.

An :class:`AnnotationSession` collects exactly one boundary per lead, in
canonical order. The list of boundaries is the only state: its length is the
index of the next lead to annotate, and the session is complete once all twelve
leads are present.

The session can be driven directly through :meth:`AnnotationSession.capture_region`,
:meth:`~AnnotationSession.undo_last` and :meth:`~AnnotationSession.cancel`, or
through discrete events passed to :meth:`AnnotationSession.dispatch`::

    session = AnnotationSession(image_size=(800, 600))
    session.on_complete(lambda boundaries: print(len(boundaries)))
    outcome = session.dispatch(RegionCaptured(rect=DisplayRect(x=10, y=10, w=40, h=40)))
    outcome.accepted  # True
"""

import uuid
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict

from ._logging import logger
from .constants import CANONICAL_LEAD_ORDER, N_LEADS
from .exceptions import LeadboxError, StateError
from .mapping import map_to_image, normalize_ratio
from .models import DisplayRect, LeadBoundary
from .types import Ratio, Size

CompletionListener = Callable[[tuple[LeadBoundary, ...]], None]


class SessionState(str, Enum):
    EMPTY = "empty"
    COLLECTING = "collecting"
    COMPLETE = "complete"


class RegionCaptured(BaseModel):
    """The operator confirmed the current selection."""

    model_config = ConfigDict(frozen=True)

    rect: DisplayRect
    ratio: tuple[float, float] = (1.0, 1.0)


class UndoRequested(BaseModel):
    model_config = ConfigDict(frozen=True)


class SessionCancelled(BaseModel):
    model_config = ConfigDict(frozen=True)


SessionEvent = RegionCaptured | UndoRequested | SessionCancelled


class EventOutcome(BaseModel):
    """Result of dispatching an event to a session.

    Attributes:
        accepted: False if the event was rejected and the session left unchanged
        state: Session state after the event
        boundary: Boundary captured or removed by the event, if any
        error: Message explaining a rejection
    """

    model_config = ConfigDict(frozen=True)

    accepted: bool
    state: SessionState
    boundary: LeadBoundary | None = None
    error: str | None = None


class AnnotationSession:
    """Finite-state machine accumulating twelve lead boundaries in canonical order.

    Args:
        image_size: (width, height) of the original image in pixels
        session_id: Identity of the session. A random id is generated if omitted.

    Attributes:
        session_id: Identity used to tie conversion requests to this session
        revision: Incremented on every change of the boundary list
    """

    def __init__(self, image_size: Size, session_id: str | None = None):
        width, height = image_size
        if width <= 0 or height <= 0:
            raise ValueError(f"Image size must be positive, got {image_size}")
        self.image_size: Size = (int(width), int(height))
        self.session_id = session_id or uuid.uuid4().hex
        self.revision = 0
        self._boundaries: list[LeadBoundary] = []
        self._listeners: list[CompletionListener] = []

    def __repr__(self) -> str:
        return f"AnnotationSession(id={self.session_id[:8]}, state={self.state.value}, captured={self.current_index}/{N_LEADS})"

    @property
    def boundaries(self) -> tuple[LeadBoundary, ...]:
        """Captured boundaries in capture order."""
        return tuple(self._boundaries)

    @property
    def current_index(self) -> int:
        return len(self._boundaries)

    @property
    def state(self) -> SessionState:
        if not self._boundaries:
            return SessionState.EMPTY
        if len(self._boundaries) == N_LEADS:
            return SessionState.COMPLETE
        return SessionState.COLLECTING

    @property
    def is_complete(self) -> bool:
        return self.state is SessionState.COMPLETE

    @property
    def next_lead(self) -> str | None:
        """Name of the lead to annotate next, None once complete."""
        if self.is_complete:
            return None
        return CANONICAL_LEAD_ORDER[self.current_index]

    def on_complete(self, listener: CompletionListener) -> None:
        """Register a callback invoked with all boundaries when the twelfth is captured."""
        self._listeners.append(listener)

    def capture_region(self, rect: DisplayRect, ratio: Ratio | float = 1.0) -> LeadBoundary:
        """Map a display-space selection and store it as the next lead's boundary.

        Exceptions raised by a completion listener propagate to the caller. The
        twelfth boundary is stored before listeners run and stays stored.

        Args:
            rect: Selection in display coordinates
            ratio: Display-to-image ratio, uniform or ``(r_x, r_y)``

        Returns:
            The stored boundary

        Raises:
            StateError: If all twelve leads are already captured
            ValidationError: If the selection maps to an empty or out-of-bounds box
        """
        boundary = self._append(rect, ratio)
        self._notify()
        return boundary

    def _append(self, rect: DisplayRect, ratio: Ratio | float) -> LeadBoundary:
        if self.is_complete:
            raise StateError(f"All {N_LEADS} lead regions are already set. Undo or cancel to change them.")

        lead_name = CANONICAL_LEAD_ORDER[self.current_index]
        boundary = map_to_image(rect, ratio, self.image_size, lead_name)
        self._boundaries.append(boundary)
        self.revision += 1
        logger.debug(
            f"Captured lead {lead_name} ({self.current_index}/{N_LEADS}): "
            f"({boundary.x1},{boundary.y1})-({boundary.x2},{boundary.y2})"
        )
        return boundary

    def _notify(self) -> None:
        if not self.is_complete:
            return
        logger.info(f"All {N_LEADS} lead regions captured")
        completed = self.boundaries
        for listener in self._listeners:
            listener(completed)

    def undo_last(self) -> LeadBoundary | None:
        """Remove the most recent boundary. Does nothing on an empty session.

        Returns:
            The removed boundary, or None if there was nothing to undo
        """
        if not self._boundaries:
            return None
        removed = self._boundaries.pop()
        self.revision += 1
        logger.debug(f"Removed lead {removed.lead_name}, next lead is {self.next_lead}")
        return removed

    def cancel(self) -> None:
        """Discard all boundaries and return to the empty state."""
        if self._boundaries:
            self._boundaries.clear()
            self.revision += 1
        logger.debug("Annotation session cancelled")

    def dispatch(self, event: SessionEvent) -> EventOutcome:
        """Apply an event, reporting rejections instead of raising them.

        Only rejections of the event itself are reported in the outcome. Errors
        raised by completion listeners propagate as in :meth:`capture_region`.

        Args:
            event: RegionCaptured, UndoRequested or SessionCancelled

        Returns:
            EventOutcome describing the result
        """
        try:
            if isinstance(event, RegionCaptured):
                boundary = self._append(event.rect, normalize_ratio(event.ratio))
            elif isinstance(event, UndoRequested):
                boundary = self.undo_last()
            elif isinstance(event, SessionCancelled):
                self.cancel()
                boundary = None
            else:
                raise TypeError(f"Unsupported session event: {type(event).__name__}")
        except LeadboxError as e:
            logger.warning(f"Rejected {type(event).__name__}: {e}")
            return EventOutcome(accepted=False, state=self.state, error=str(e))

        if isinstance(event, RegionCaptured):
            self._notify()
        return EventOutcome(accepted=True, state=self.state, boundary=boundary)
