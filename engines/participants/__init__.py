"""
Custody Ledger Participants Engine
=====================================
Registered actors, their roles, and the admin-only registry.
"""
