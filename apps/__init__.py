"""Django applications of the booking engine."""
