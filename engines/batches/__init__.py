"""
Custody Ledger Batches Engine
================================
Batch records, the status state machine, and ownership history.
"""
