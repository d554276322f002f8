import copy
import json
from urllib.parse import parse_qs

import httpx
import pytest

from akibaflow.config import DEFAULT_CONFIG
from akibaflow.context import AppContext
from akibaflow.core.models import User

BASE_URL = "http://testserver/api/v1"
TOKEN = "token-abc"

USER = {
    "id": 1,
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "phone_number": "0700000000",
    "active": True,
    "created_at": "2025-01-01T00:00:00",
    "updated_at": "2025-01-01T00:00:00",
}


def _account(id_, name, initial, current, type_="checking"):
    return {
        "id": id_, "user_id": 1, "name": name,
        "initial_balance": initial, "current_balance": current,
        "currency": "KES", "type": type_, "is_active": True,
        "created_by": 1, "updated_by": 1,
        "created_at": "2025-01-01T00:00:00", "updated_at": "2025-01-01T00:00:00",
    }


def _transaction(id_, amount, kind, account_id, category_id, description, day):
    return {
        "id": id_, "user_id": 1, "amount": amount, "transaction_type": kind,
        "account_id": account_id, "category_id": category_id,
        "description": description, "transaction_date": f"{day}T00:00:00Z",
        "is_automated": False, "raw_text": "",
        "created_at": f"{day}T08:00:00", "updated_at": f"{day}T08:00:00",
    }


class FakeApi:
    """In-memory stand-in for the AkibaFlow REST API, used as a MockTransport handler."""

    def __init__(self):
        self.requests = []
        self.overrides = {}
        self.accounts = [
            _account(1, "Main Checking", "1000.00", "1250.50"),
            _account(2, "Savings", "500.00", "749.50", "savings"),
        ]
        self.categories = [
            {"id": 1, "name": "Food", "system_name": "food", "is_custom": False, "user_id": 1},
            {"id": 2, "name": "Transport", "system_name": "transport", "is_custom": False, "user_id": 1},
            {"id": 3, "name": "Salary", "system_name": "other", "is_custom": True, "user_id": 1},
        ]
        self.transactions = [
            _transaction(1, "120.00", "EXPENSE", 1, 1, "Grocery run", "2025-05-01"),
            _transaction(2, "3000.00", "INCOME", 1, 3, "May salary", "2025-05-01"),
            _transaction(3, "80.50", "EXPENSE", 2, 1, "Dinner out", "2025-05-02"),
            _transaction(4, "45.00", "EXPENSE", 1, 2, "Bus fare", "2025-05-03"),
        ]

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == "/api/v1" + path]

    def __call__(self, request):
        self.requests.append(request)
        path = request.url.path[len("/api/v1"):]
        key = (request.method, path)
        if key in self.overrides:
            status, body = self.overrides[key]
            return httpx.Response(status, json=body)

        if key == ("POST", "/auth/login"):
            form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
            if form.get("username") == USER["email"] and form.get("password") == "secret":
                return httpx.Response(200, json={"access_token": TOKEN, "token_type": "bearer"})
            return httpx.Response(401, json={"detail": "Incorrect username or password"})
        if key == ("POST", "/auth/register"):
            body = json.loads(request.content)
            if body["email"] == USER["email"]:
                return httpx.Response(400, json={"detail": [
                    {"loc": ["body", "email"], "msg": "Email already registered", "type": "value_error"}
                ]})
            user = {k: v for k, v in body.items() if k != "password"}
            return httpx.Response(201, json={**user, "id": 2, "active": True})

        if request.headers.get("Authorization") != f"Bearer {TOKEN}":
            return httpx.Response(401, json={"detail": "Not authenticated"})

        if key == ("GET", "/auth/whoami"):
            return httpx.Response(200, json=USER)
        if key == ("GET", "/accounts/"):
            return httpx.Response(200, json=self.accounts)
        if key == ("POST", "/accounts/"):
            body = json.loads(request.content)
            balance = str(body["initial_balance"])
            account = _account(len(self.accounts) + 1, body["name"], balance, balance, body["type"])
            account["currency"] = body["currency"]
            self.accounts.append(account)
            return httpx.Response(201, json=account)
        if key == ("GET", "/categories"):
            return httpx.Response(200, json=self.categories)
        if key == ("POST", "/categories"):
            body = json.loads(request.content)
            category = {"id": len(self.categories) + 1, "is_custom": True, "user_id": 1,
                        "system_name": body.get("system_name"), "name": body["name"]}
            self.categories.append(category)
            return httpx.Response(201, json=category)
        if key == ("GET", "/transactions"):
            skip = int(request.url.params.get("skip", 0))
            limit = int(request.url.params.get("limit", 100))
            return httpx.Response(200, json=self.transactions[skip:skip + limit])
        if key == ("POST", "/transactions"):
            body = json.loads(request.content)
            tx = {**body, "id": len(self.transactions) + 1, "user_id": 1,
                  "is_automated": False, "raw_text": None}
            self.transactions.append(tx)
            return httpx.Response(201, json=tx)

        resource, _, item_id = path.strip("/").partition("/")
        if resource == "user" and item_id.isdigit() and request.method == "PUT":
            if int(item_id) != USER["id"]:
                return httpx.Response(404, json={"detail": "User not found"})
            return httpx.Response(200, json={**USER, **json.loads(request.content)})
        collection = {
            "accounts": self.accounts,
            "categories": self.categories,
            "transactions": self.transactions,
        }.get(resource)
        if collection is not None and item_id.isdigit():
            item = next((x for x in collection if x["id"] == int(item_id)), None)
            if item is None:
                return httpx.Response(404, json={"detail": "Not found"})
            if request.method == "GET":
                return httpx.Response(200, json=item)
            if request.method == "PATCH":
                item.update(json.loads(request.content))
                return httpx.Response(200, json=item)
            if request.method == "DELETE":
                collection.remove(item)
                return httpx.Response(204)
        return httpx.Response(404, json={"detail": "Not found"})


@pytest.fixture
def fake_api():
    return FakeApi()


@pytest.fixture
def config(tmp_path):
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    cfg["api_base_url"] = BASE_URL
    cfg["session_file"] = str(tmp_path / "session.json")
    cfg["config_path"] = str(tmp_path / "config.yaml")
    return cfg


@pytest.fixture
def app(config, fake_api):
    context = AppContext.open(config, transport=httpx.MockTransport(fake_api))
    yield context
    context.close()


@pytest.fixture
def logged_in_app(app):
    app.session.set(User.model_validate(USER), TOKEN)
    return app
