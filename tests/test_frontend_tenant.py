import copy
import unittest
from unittest.mock import MagicMock

from frontend import ApiClient, ApiError, ClientConfig, TenantDashboard
from frontend.common import STRIPE_MISCONFIGURED
from tests.constants import PROPERTY, PROPERTY_ID

CONFIG = ClientConfig(api_base_url="http://api.local", stripe_publishable_key="pk_test_1")


def tenant_view(flat_no="101"):
    doc = copy.deepcopy(PROPERTY)
    doc["tenants"] = [
        {k: v for k, v in t.items() if k != "password"} for t in doc["tenants"] if t["flatNo"] == flat_no
    ]
    return doc


class TenantDashboardTestCase(unittest.TestCase):

    def setUp(self):
        self.api = MagicMock(spec=ApiClient)
        self.api.get_property.return_value = tenant_view()
        self.confirm = MagicMock(return_value=True)
        self.page = TenantDashboard(PROPERTY_ID, "101", self.confirm, api=self.api, config=CONFIG)
        self.page.load()


class TestLoading(TenantDashboardTestCase):

    def test_loads_tenant(self):
        self.assertEqual(self.page.tenant["name"], "Ravi Kumar")
        self.assertEqual(self.page.message, "")
        self.assertTrue(self.page.can_pay_rent)

    def test_own_requests_newest_first(self):
        self.assertEqual([r["id"] for r in self.page.maintenance_requests], ["mr-1", "mr-2"])

    def test_delete_offered_only_for_pending(self):
        rows = {r["id"]: r["canDelete"] for r in self.page.request_rows()}
        self.assertEqual(rows, {"mr-1": True, "mr-2": False})

    def test_missing_tenant_is_load_failure(self):
        page = TenantDashboard(PROPERTY_ID, "555", self.confirm, api=self.api, config=CONFIG)
        page.load()
        self.assertIsNone(page.tenant)
        self.assertTrue(page.message.startswith("Error loading dashboard: Tenant for Flat No: \"555\""))

    def test_missing_stripe_key_disables_payment_only(self):
        page = TenantDashboard(PROPERTY_ID, "101", self.confirm, api=self.api,
                               config=ClientConfig(api_base_url="http://api.local"))
        page.load()
        self.assertEqual(page.config_error, STRIPE_MISCONFIGURED)
        self.assertFalse(page.is_fatal)
        self.assertIsNotNone(page.tenant)
        self.assertFalse(page.can_pay_rent)

    def test_missing_api_url_is_fatal(self):
        page = TenantDashboard(PROPERTY_ID, "101", self.confirm, config=ClientConfig(stripe_publishable_key="pk_x"))
        page.load()
        self.assertTrue(page.is_fatal)


class TestMaintenanceRequests(TenantDashboardTestCase):

    def test_empty_description_makes_no_call(self):
        self.assertFalse(self.page.raise_request("   "))
        self.assertEqual(self.page.message, "Maintenance description cannot be empty.")
        self.api.update_property.assert_not_called()

    def test_raise_request_puts_optimistic_document(self):
        saved = tenant_view()
        saved["maintenanceRequests"].append({"id": "mr-9", "flatNo": "101", "description": "Fan", "status": "Pending"})
        self.api.update_property.return_value = saved

        self.assertTrue(self.page.raise_request(" Fan "))

        sent = self.api.update_property.call_args.args[1]
        new_request = sent["maintenanceRequests"][-1]
        self.assertTrue(new_request["id"].startswith("temp-mr-"))
        self.assertEqual((new_request["description"], new_request["status"]), ("Fan", "Pending"))
        self.assertEqual(self.page.property, saved)

    def test_failed_raise_rolls_back(self):
        before = copy.deepcopy(self.page.property)
        self.api.update_property.side_effect = ApiError("Service unavailable", status=503)
        self.assertFalse(self.page.raise_request("Fan"))
        self.assertEqual(self.page.property, before)
        self.assertEqual(self.page.message, "Error submitting request: Service unavailable")

    def test_failed_delete_restores_list(self):
        before = [r["id"] for r in self.page.maintenance_requests]
        self.api.update_property.side_effect = ApiError("Service unavailable", status=503)

        self.assertFalse(self.page.delete_request("mr-1"))

        self.assertEqual([r["id"] for r in self.page.maintenance_requests], before)
        sent = self.api.update_property.call_args.args[1]
        self.assertNotIn("mr-1", [r["id"] for r in sent["maintenanceRequests"]])

    def test_delete_pending_request(self):
        self.api.update_property.return_value = None
        self.assertTrue(self.page.delete_request("mr-1"))
        self.assertEqual([r["id"] for r in self.page.maintenance_requests], ["mr-2"])
        self.confirm.assert_called_once()

    def test_non_pending_request_cannot_be_deleted(self):
        self.assertFalse(self.page.delete_request("mr-2"))
        self.api.update_property.assert_not_called()

    def test_cancelled_confirmation(self):
        self.confirm.return_value = False
        self.assertFalse(self.page.delete_request("mr-1"))
        self.api.update_property.assert_not_called()


class TestPayRent(TenantDashboardTestCase):

    def test_redirects_to_hosted_checkout(self):
        self.api.create_checkout_session.return_value = {"id": "cs_1", "url": "https://checkout.stripe.com/c/pay/cs_1"}
        redirect = self.page.pay_rent()
        self.assertEqual(redirect.path, "https://checkout.stripe.com/c/pay/cs_1")
        body = self.api.create_checkout_session.call_args.args[0]
        self.assertEqual(body["tenant"]["email"], "101-tenant@example.com")
        self.assertEqual(body["propertyId"], PROPERTY_ID)

    def test_missing_session_id_aborts(self):
        self.api.create_checkout_session.return_value = {}
        self.assertIsNone(self.page.pay_rent())
        self.assertEqual(
            self.page.message,
            "Payment Process Error: Received an invalid session from the server. Cannot proceed with payment.",
        )

    def test_payment_blocked_without_stripe_key(self):
        self.page.config = ClientConfig(api_base_url="http://api.local", stripe_publishable_key="sk_wrong")
        self.assertIsNone(self.page.pay_rent())
        self.api.create_checkout_session.assert_not_called()


class TestHistoryViews(TenantDashboardTestCase):

    def test_notifications_and_history_newest_first(self):
        self.page.tenant = {
            "flatNo": "101",
            "paymentHistory": [{"id": "a", "date": "2024-01-01"}, {"id": "b", "date": "2024-03-01"}],
            "notifiedMessages": [{"id": "n1", "date": "2024-02-01"}, {"id": "n2", "date": "2024-02-05"}],
        }
        self.assertEqual([p["id"] for p in self.page.payment_history], ["b", "a"])
        self.assertEqual([n["id"] for n in self.page.notifications], ["n2", "n1"])
