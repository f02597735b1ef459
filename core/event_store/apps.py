"""
Custody Ledger Core — Event Store App Configuration
======================================================
Durable home of the change feed when the ledger runs on Django.

This app:
- Persists sealed feed events (append-only)
- Keeps the hash chain queryable

This app does NOT:
- Interpret event meaning
- Hold ledger state (projections are rebuilt from the feed)
- Dispatch events (that is core.events responsibility)
"""

from django.apps import AppConfig


class EventStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.event_store"
    label = "event_store"
    verbose_name = "Custody Feed Store"
