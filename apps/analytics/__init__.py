"""Guest and host dashboard statistics."""
