"""Bookings app package.

Booking requests, the status lifecycle driven by hosts, guests and payment
verification, and the periodic maintenance that closes finished or stale
bookings. Availability is checked and the booking row written in one
transaction.
"""
