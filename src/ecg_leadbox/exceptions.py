"""Error taxonomy for annotation, payload assembly and service transport."""


class LeadboxError(Exception):
    """Base class for all errors raised by ecg-leadbox."""


class ValidationError(LeadboxError, ValueError):
    """Input was rejected. State is left unchanged and the action can be retried.

    Raised for degenerate or out-of-bounds regions, an incomplete set of lead
    boundaries, a missing patient name, a scale factor below the minimum or an
    unsupported source image.
    """


class StateError(LeadboxError, RuntimeError):
    """An operation was attempted in a state that does not allow it."""


class TransportError(LeadboxError):
    """A remote service was unreachable or answered with a malformed response."""
