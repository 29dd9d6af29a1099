"""E-mail notifications for accounts and bookings."""
