"""Tests for caller identity."""

import pytest
from protean.exceptions import ValidationError

from storefront.shared.identity import Requester, Role


class TestRequester:
    def test_defaults_to_customer(self):
        requester = Requester.of("cust-001")
        assert requester.role == Role.CUSTOMER
        assert not requester.is_admin

    def test_admin_can_access_anything(self):
        admin = Requester.of("admin-1", "Admin")
        assert admin.can_access("cust-001")

    def test_customer_only_accesses_own(self):
        customer = Requester.of("cust-001", "Customer")
        assert customer.can_access("cust-001")
        assert not customer.can_access("cust-002")

    def test_merchant_is_not_privileged_for_ownership(self):
        merchant = Requester.of("merch-1", "Merchant")
        assert merchant.is_merchant
        assert not merchant.can_access("cust-001")

    def test_user_required(self):
        with pytest.raises(ValidationError):
            Requester.of(None)

    def test_unknown_role(self):
        with pytest.raises(ValidationError) as exc:
            Requester.of("cust-001", "Superuser")
        assert "role" in exc.value.messages
