from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="FeedEventRecord",
            fields=[
                (
                    "sequence",
                    models.PositiveBigIntegerField(
                        primary_key=True,
                        serialize=False,
                        help_text="Monotonic feed position. Never reused.",
                    ),
                ),
                (
                    "event_type",
                    models.CharField(
                        max_length=255,
                        help_text="engine.domain.action.vN (e.g. batches.batch.created.v1).",
                    ),
                ),
                ("source_engine", models.CharField(max_length=100)),
                (
                    "actor_id",
                    models.CharField(
                        max_length=255,
                        help_text="Verified caller identity that performed the operation.",
                    ),
                ),
                (
                    "batch_id",
                    models.PositiveBigIntegerField(
                        blank=True,
                        null=True,
                        help_text="Batch the event belongs to. Null for participant events.",
                    ),
                ),
                (
                    "action",
                    models.CharField(
                        blank=True,
                        max_length=32,
                        null=True,
                        help_text="Audit action tag (CREATED, STATUS_UPDATED, ...).",
                    ),
                ),
                ("details", models.TextField(blank=True, default="")),
                ("location", models.TextField(blank=True, null=True)),
                ("occurred_at", models.DateTimeField()),
                (
                    "payload",
                    models.JSONField(
                        help_text="Data sufficient to rebuild ledger state by replay.",
                    ),
                ),
                ("previous_event_hash", models.CharField(max_length=64)),
                ("event_hash", models.CharField(max_length=64, unique=True)),
            ],
            options={
                "db_table": "custody_feed_event",
                "ordering": ["sequence"],
                "indexes": [
                    models.Index(
                        fields=["batch_id", "sequence"],
                        name="idx_feed_batch_seq",
                    ),
                    models.Index(
                        fields=["event_type"],
                        name="idx_feed_type",
                    ),
                ],
            },
        ),
    ]
