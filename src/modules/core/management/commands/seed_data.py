from __future__ import annotations

import random
import uuid
from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.utils import timezone

from modules.customers.models import CustomerProfile
from modules.orders.constants import DeliveryType, OrderStatus
from modules.orders.models import Order

SEED_MARKER = "seed-"

GARMENTS = [
    ("Shirt ironing", Decimal("25.00")),
    ("Trouser ironing", Decimal("30.00")),
    ("Saree steam press", Decimal("80.00")),
    ("Suit dry clean", Decimal("350.00")),
    ("Bedsheet wash & fold", Decimal("60.00")),
    ("Curtain dry clean", Decimal("220.00")),
    ("Kurta ironing", Decimal("20.00")),
]

SLOTS = ["09:00 - 11:00", "11:00 - 13:00", "15:00 - 17:00", "18:00 - 20:00"]


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=50)

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        customers = self._seed_customers()
        orders_created = self._seed_orders(customers, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"customers={len(customers)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_customers(self) -> list[CustomerProfile]:
        self.stdout.write("Creating customer profiles...")
        customers: list[CustomerProfile] = []
        seed_customers = [
            ("Ananya Rao", "ananya@example.com", "+91 98450 11111"),
            ("Rahul Mehta", "rahul@example.com", "+91 98450 22222"),
            ("Priya Nair", "priya@example.com", "+91 98450 33333"),
            ("Vikram Singh", "vikram@example.com", "+91 98450 44444"),
            ("Sneha Iyer", "sneha@example.com", ""),
            ("Arjun Das", "", "+91 98450 66666"),
        ]
        for full_name, email, phone in seed_customers:
            customer, _ = CustomerProfile.objects.get_or_create(
                full_name=full_name,
                defaults={"email": email, "phone": phone},
            )
            customers.append(customer)
        self.stdout.write(self.style.SUCCESS("Creating customer profiles... Done!"))
        return customers

    def _seed_orders(self, customers: list[CustomerProfile], count: int) -> int:
        self.stdout.write("Creating orders...")
        if not customers:
            self.stdout.write(self.style.WARNING("Skipping orders (no customers)."))
            return 0

        # (order_status, legacy status) pairs as external writers leave them.
        status_weights = [
            ((OrderStatus.CONFIRMED, ""), 0.25),
            ((OrderStatus.PENDING, OrderStatus.PENDING), 0.20),
            ((OrderStatus.ACCEPTED, ""), 0.15),
            ((OrderStatus.PICKED_UP, OrderStatus.CONFIRMED), 0.10),
            ((OrderStatus.DELIVERED, OrderStatus.DELIVERED), 0.15),
            ((OrderStatus.CANCELLED, ""), 0.10),
            (("", OrderStatus.IN_TRANSIT), 0.05),
        ]
        statuses = [s for s, _ in status_weights]
        weights = [w for _, w in status_weights]

        orders_created = 0
        for i in range(count):
            marker = f"{SEED_MARKER}{i + 1}"
            if Order.objects.filter(payment_id=marker).exists():
                continue

            order_status, legacy_status = random.choices(statuses, weights=weights, k=1)[0]
            # Some orders point at customers that no longer exist.
            if random.random() < 0.1:
                user_id = uuid.uuid4()
            else:
                user_id = random.choice(customers).id

            items = []
            total = Decimal("0.00")
            for name, price in random.sample(GARMENTS, k=random.randint(1, 4)):
                quantity = random.randint(1, 6)
                items.append({"name": name, "quantity": quantity, "price": str(price)})
                total += price * quantity

            pickup = timezone.localdate() + timedelta(days=random.randint(-20, 3))
            order = Order.objects.create(
                user_id=user_id,
                total_amount=total,
                order_status=order_status,
                status=legacy_status,
                pickup_date=pickup,
                delivery_date=pickup + timedelta(days=2),
                delivery_type=random.choice(DeliveryType.values),
                delivery_address=f"{random.randint(1, 300)} MG Road, Bengaluru",
                pickup_slot_display_time=random.choice(SLOTS),
                delivery_slot_display_time=random.choice(SLOTS),
                payment_method=random.choice(["upi", "card", "cod"]),
                payment_status=random.choice(["paid", "pending"]),
                payment_id=marker,
                items=items,
            )
            if order_status == OrderStatus.CANCELLED:
                Order.objects.filter(id=order.id).update(
                    cancelled_at=timezone.now(),
                    cancellation_reason="Customer unavailable",
                )

            created_at = timezone.now() - timedelta(days=random.randint(0, 30))
            Order.objects.filter(id=order.id).update(created_at=created_at)
            orders_created += 1

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return orders_created
