from __future__ import annotations

import uuid

import pytest

from modules.customers.models import CustomerProfile
from modules.customers.repositories.django_repository import CustomerDjangoRepository

pytestmark = pytest.mark.unit


class TestCustomerDjangoRepository:
    def test_get_by_id(self, customer):
        assert CustomerDjangoRepository().get_by_id(str(customer.id)) == customer

    def test_get_by_id_malformed_returns_none(self):
        assert CustomerDjangoRepository().get_by_id("not-a-uuid") is None

    def test_get_many_skips_unknown_and_malformed_ids(self, customer):
        other = CustomerProfile.objects.create(full_name="Rahul Mehta")
        found = CustomerDjangoRepository().get_many(
            [str(customer.id), other.id, str(uuid.uuid4()), "garbage", None]
        )
        assert set(found) == {str(customer.id), str(other.id)}
        assert found[str(other.id)].full_name == "Rahul Mehta"

    def test_get_many_empty(self):
        assert CustomerDjangoRepository().get_many([]) == {}

    def test_list(self, customer):
        assert CustomerDjangoRepository().list() == [customer]
