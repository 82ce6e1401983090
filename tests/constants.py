import copy
import unittest

import mongomock
from fastapi.testclient import TestClient

import database
from main import app
from security import create_access_token, hash_password, ROLE_OWNER, ROLE_TENANT

OWNER_ID = "owner-1"
OTHER_OWNER_ID = "owner-2"
PROPERTY_ID = "prop-1"
OTHER_PROPERTY_ID = "prop-2"

OWNER_USER = {
    "id": OWNER_ID,
    "role": "owner",
    "email": "a@b.com",
    "username": "alice",
    "name": "Alice Owner",
    "password": "x",
}

TENANT_101 = {
    "flatNo": "101",
    "name": "Ravi Kumar",
    "password": "p1",
    "rentAmount": 1200,
    "paymentStatus": "Pending",
    "paymentHistory": [
        {"id": "pay-1", "amount": 1200, "date": "2024-01-03T10:00:00+00:00", "status": "Paid"},
    ],
    "notifiedMessages": [],
    "lastNotify": None,
}

TENANT_102 = {
    "flatNo": "102",
    "name": "Meera Shah",
    "username": "meera",
    "email": "meera@example.com",
    "password": "p2",
    "rentAmount": 950.5,
    "paymentStatus": "Paid",
    "paymentHistory": [],
    "notifiedMessages": [
        {"id": "n-1", "message": "Water shut off on Friday", "date": "2024-02-01T08:00:00+00:00"},
    ],
    "lastNotify": "2024-02-01T08:00:00+00:00",
}

REQUESTS = [
    {"id": "mr-1", "flatNo": "101", "description": "Leaky faucet", "status": "Pending", "remarks": "", "date": "2024-03-01"},
    {"id": "mr-2", "flatNo": "101", "description": "Broken window", "status": "In Progress", "remarks": "Glass ordered", "date": "2024-02-10"},
    {"id": "mr-3", "flatNo": "102", "description": "No hot water", "status": "Resolved", "remarks": "Heater replaced", "date": "2024-01-15"},
    {"id": "mr-4", "flatNo": "999", "description": "Door jammed", "status": "Pending", "remarks": "", "date": "2024-03-05"},
]

PROPERTY = {
    "id": PROPERTY_ID,
    "ownerId": OWNER_ID,
    "name": "Lakeview Apartments",
    "location": "Pune",
    "tenants": [TENANT_101, TENANT_102],
    "maintenanceRequests": REQUESTS,
}


def hashed_property():
    doc = copy.deepcopy(PROPERTY)
    for tenant in doc["tenants"]:
        tenant["password"] = hash_password(tenant["password"])
    return doc


class ApiTestCase(unittest.TestCase):
    """Runs the app against an in-memory document store."""

    def setUp(self):
        self.db = mongomock.MongoClient().rentcare_test
        database.set_database(self.db)
        self.client = TestClient(app)

    def tearDown(self):
        database.set_database(None)

    def seed_owner(self, user=None):
        user = copy.deepcopy(user or OWNER_USER)
        self.db["users"].insert_one(user)
        return user["id"]

    def seed_property(self, doc=None):
        doc = copy.deepcopy(doc or PROPERTY)
        self.db["properties"].insert_one(doc)
        return doc["id"]

    def stored_property(self, property_id=PROPERTY_ID):
        return self.db["properties"].find_one({"id": property_id}, {"_id": 0})

    def owner_headers(self, owner_id=OWNER_ID):
        return {"Authorization": f"Bearer {create_access_token(owner_id, ROLE_OWNER)}"}

    def tenant_headers(self, property_id=PROPERTY_ID, flat_no="101"):
        token = create_access_token(f"{property_id}:{flat_no}", ROLE_TENANT, propertyId=property_id, flatNo=flat_no)
        return {"Authorization": f"Bearer {token}"}
