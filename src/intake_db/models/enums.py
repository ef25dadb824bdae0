"""Database-level enumerations for intake sessions."""

import enum


class SessionStatus(str, enum.Enum):
    """Lifecycle states for an intake session.

    Transitions:
        in_progress -> completed  (step 5, the IFC, submitted)

    There is no failure state; rejected submissions leave the session as-is.
    """

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
