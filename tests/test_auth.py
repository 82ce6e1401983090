from security import is_hashed
from services import find_tenant
from tests.constants import ApiTestCase, OWNER_ID, PROPERTY_ID


class TestLogin(ApiTestCase):

    def login(self, identifier, password):
        return self.client.post("/auth/login", json={"identifier": identifier, "password": password})

    def test_owner_login_redirects_to_owner_dashboard(self):
        self.seed_owner()
        response = self.login("a@b.com", "x")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["role"], "owner")
        self.assertEqual(body["redirect"], f"/OwnerDashboard/{OWNER_ID}")
        self.assertTrue(body["token"])

    def test_owner_login_upgrades_plaintext_password(self):
        self.seed_owner()
        self.login("A@B.com", "x")
        stored = self.db["users"].find_one({"id": OWNER_ID})
        self.assertTrue(is_hashed(stored["password"]))
        # Still works after the upgrade
        self.assertEqual(self.login("alice", "x").status_code, 200)

    def test_wrong_password(self):
        self.seed_owner()
        response = self.login("a@b.com", "nope")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "Invalid email/username or password.")

    def test_non_owner_user_is_not_matched(self):
        self.seed_owner({"id": "u-9", "role": "staff", "email": "s@b.com", "password": "x"})
        self.assertEqual(self.login("s@b.com", "x").status_code, 401)

    def test_tenant_login_by_flat_number(self):
        self.seed_property()
        response = self.login("101", "p1")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["role"], "tenant")
        self.assertEqual(body["redirect"], f"/TenantDashboard/{PROPERTY_ID}/101")
        tenant = find_tenant(self.stored_property(), "101")
        self.assertTrue(is_hashed(tenant["password"]))

    def test_tenant_login_by_username(self):
        self.seed_property()
        body = self.login("MEERA", "p2").json()
        self.assertEqual(body["flatNo"], "102")

    def test_owner_checked_before_tenants(self):
        self.seed_owner({"id": "owner-9", "role": "owner", "username": "101", "password": "p1"})
        self.seed_property()
        body = self.login("101", "p1").json()
        self.assertEqual(body["role"], "owner")

    def test_property_without_tenant_list_is_skipped(self):
        self.seed_property({"id": "empty", "ownerId": OWNER_ID, "name": "Plot", "location": "Goa"})
        self.seed_property()
        self.assertEqual(self.login("101", "p1").status_code, 200)

    def test_blank_credentials_rejected(self):
        self.assertEqual(self.login("  ", "x").status_code, 400)

    def test_me_requires_token(self):
        self.assertEqual(self.client.get("/auth/me").status_code, 401)
        body = self.client.get("/auth/me", headers=self.tenant_headers()).json()
        self.assertEqual(body["propertyId"], PROPERTY_ID)
        self.assertEqual(body["flatNo"], "101")
