"""Business rules for campgrounds, bookings, payment methods and the ledger.

Every operation takes an explicit :class:`security.principal.Principal`
instead of reading request state, and raises :mod:`services.errors`
exceptions that the HTTP layer maps to status codes.
"""
