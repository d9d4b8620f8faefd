"""
                Bella Vista Restaurant

Backend for the restaurant website: menu browser, table reservations
confirmed by one-time passcode, and the admin dashboard API.
"""

__version__ = "1.0.0"
