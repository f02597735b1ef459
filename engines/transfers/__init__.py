"""
Custody Ledger Transfers Engine
==================================
Two-phase custody handoff: request → accept | reject | cancel.
"""
