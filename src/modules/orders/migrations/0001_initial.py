from decimal import Decimal

import django.core.validators
import uuid6
from django.db import migrations, models

STATUS_CHOICES = [
    ("pending", "Pending"),
    ("confirmed", "Confirmed"),
    ("accepted", "Accepted"),
    ("picked_up", "Picked up"),
    ("in_transit", "In transit"),
    ("delivered", "Delivered"),
    ("completed", "Completed"),
    ("cancelled", "Cancelled"),
    ("rejected", "Rejected"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid6.uuid7,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user_id", models.UUIDField(blank=True, db_index=True, null=True)),
                (
                    "total_amount",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=12,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0.00"))
                        ],
                    ),
                ),
                (
                    "discount_amount",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=12, null=True
                    ),
                ),
                (
                    "applied_coupon_code",
                    models.CharField(blank=True, default="", max_length=64),
                ),
                (
                    "status",
                    models.CharField(
                        blank=True, choices=STATUS_CHOICES, default="", max_length=20
                    ),
                ),
                (
                    "order_status",
                    models.CharField(
                        blank=True,
                        choices=STATUS_CHOICES,
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("pickup_date", models.DateField(blank=True, null=True)),
                ("delivery_date", models.DateField(blank=True, null=True)),
                (
                    "delivery_type",
                    models.CharField(
                        choices=[("pickup", "Pickup"), ("delivery", "Delivery")],
                        default="pickup",
                        max_length=20,
                    ),
                ),
                ("delivery_address", models.TextField(blank=True, default="")),
                (
                    "pickup_slot_display_time",
                    models.CharField(blank=True, default="", max_length=64),
                ),
                (
                    "delivery_slot_display_time",
                    models.CharField(blank=True, default="", max_length=64),
                ),
                (
                    "payment_method",
                    models.CharField(blank=True, default="", max_length=32),
                ),
                (
                    "payment_status",
                    models.CharField(blank=True, default="", max_length=32),
                ),
                (
                    "payment_id",
                    models.CharField(blank=True, default="", max_length=128),
                ),
                ("items", models.JSONField(blank=True, default=list)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancellation_reason", models.TextField(blank=True, default="")),
            ],
            options={
                "db_table": "orders",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["order_status"], name="orders_order_status_idx"
                    ),
                    models.Index(fields=["-created_at"], name="orders_created_idx"),
                ],
            },
        ),
    ]
