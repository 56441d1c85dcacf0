"""Background processing dispatch."""
