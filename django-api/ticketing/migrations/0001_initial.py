import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("organizer", models.CharField(db_index=True, max_length=42)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField()),
                ("location", models.CharField(max_length=255)),
                ("starts_at", models.DateTimeField()),
                ("ends_at", models.DateTimeField()),
                ("metadata_uri", models.TextField(blank=True, default="")),
                (
                    "fee_token",
                    models.PositiveSmallIntegerField(
                        choices=[(0, "XFI"), (1, "XUSD"), (2, "MPX")], default=0
                    ),
                ),
                ("active", models.BooleanField(default=True)),
                ("tier_count", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("ends_at__gt", models.F("starts_at"))),
                        name="event_ends_after_start",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="TicketTier",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("index", models.PositiveIntegerField()),
                ("name", models.CharField(max_length=100)),
                ("price", models.DecimalField(decimal_places=0, max_digits=78)),
                ("max_supply", models.PositiveIntegerField()),
                ("current_supply", models.PositiveIntegerField(default=0)),
                (
                    "token",
                    models.PositiveSmallIntegerField(
                        choices=[(0, "XFI"), (1, "XUSD"), (2, "MPX")], default=0
                    ),
                ),
                ("active", models.BooleanField(default=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="tiers",
                        to="ticketing.event",
                    ),
                ),
            ],
            options={
                "ordering": ["event", "index"],
                "constraints": [
                    models.UniqueConstraint(fields=("event", "index"), name="tier_index_per_event"),
                    models.CheckConstraint(
                        condition=models.Q(("current_supply__lte", models.F("max_supply"))),
                        name="tier_supply_within_max",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Ticket",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("owner", models.CharField(db_index=True, max_length=42)),
                ("attendee_count", models.PositiveSmallIntegerField()),
                ("total_amount_paid", models.DecimalField(decimal_places=0, max_digits=78)),
                ("token", models.PositiveSmallIntegerField(choices=[(0, "XFI"), (1, "XUSD"), (2, "MPX")])),
                ("purchased_at", models.DateTimeField()),
                (
                    "event_status_at_purchase",
                    models.CharField(
                        choices=[("upcoming", "Upcoming"), ("live", "Live"), ("ended", "Ended")],
                        max_length=16,
                    ),
                ),
                ("used", models.BooleanField(default=False)),
                ("used_at", models.DateTimeField(blank=True, null=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="tickets",
                        to="ticketing.event",
                    ),
                ),
                (
                    "tier",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="tickets",
                        to="ticketing.tickettier",
                    ),
                ),
            ],
            options={
                "ordering": ["-purchased_at"],
                "indexes": [
                    models.Index(fields=["owner", "-purchased_at"], name="ticket_owner_recent_idx")
                ],
            },
        ),
    ]
