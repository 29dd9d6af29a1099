"""StayBook Django apps."""
