from security import is_hashed
from tests.constants import ApiTestCase


class TestUsers(ApiTestCase):

    def test_list_requires_owner(self):
        self.seed_owner()
        self.assertEqual(self.client.get("/users").status_code, 401)
        self.assertEqual(self.client.get("/users", headers=self.tenant_headers()).status_code, 403)

    def test_list_hides_passwords(self):
        self.seed_owner()
        users = self.client.get("/users", headers=self.owner_headers()).json()
        self.assertEqual(len(users), 1)
        self.assertEqual(users[0]["email"], "a@b.com")
        self.assertNotIn("password", users[0])

    def test_create_hashes_password(self):
        response = self.client.post("/users", json={"email": "new@b.com", "password": "pw", "name": "New"})
        self.assertEqual(response.status_code, 201)
        user_id = response.json()["id"]
        stored = self.db["users"].find_one({"id": user_id})
        self.assertEqual(stored["role"], "owner")
        self.assertTrue(is_hashed(stored["password"]))
        self.assertIn("created_at", stored)

    def test_duplicate_email_conflicts(self):
        self.seed_owner()
        response = self.client.post("/users", json={"email": "A@B.COM", "password": "pw"})
        self.assertEqual(response.status_code, 409)

    def test_email_or_username_required(self):
        response = self.client.post("/users", json={"password": "pw"})
        self.assertEqual(response.status_code, 400)
