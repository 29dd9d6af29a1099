"""Properties app package.

Listings, their photo galleries, the landing-page categories and the
per-date availability calendar, together with the availability check and
stay pricing used by bookings.
"""
