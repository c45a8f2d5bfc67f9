import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import RESTAURANTS
from main import create_app

ALLOWED_ORIGIN = "http://localhost:8082"

TEST_USER = {
    "fullName": "Test User",
    "phoneNumber": "+15550001111",
    "email": "user@test.com",
    "password": "s3cret-pass",
}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        secret_key="test-secret",
        bcrypt_rounds=4,
        allowed_origins=[ALLOWED_ORIGIN],
    )


@pytest.fixture
def db():
    return mongomock.MongoClient()["foodie_test"]


@pytest.fixture
def client(settings, db):
    app = create_app(settings, db=db)
    with TestClient(app) as test_client:
        yield test_client


def make_restaurant(name, menus, location="Downtown"):
    return {"name": name, "image": f"https://img.test/{name}.png", "location": location, "menus": menus}


def make_item(item_name, price, category, rating, sub_category=None):
    item = {
        "itemName": item_name,
        "price": price,
        "category": category,
        "image": f"https://img.test/{item_name}.png",
        "rating": rating,
    }
    if sub_category is not None:
        item["subCategory"] = sub_category
    return item


@pytest.fixture
def restaurants(db):
    docs = [
        make_restaurant("Pizza Hut", [
            make_item("Margherita", 12, "Pizza", 4.5, "Veg"),
            make_item("Pepperoni", 16, "Pizza", 4.1, "Non-Veg"),
            make_item("Cola", 3, "Drinks", 3.9, "Cold"),
        ]),
        make_restaurant("Cafe Mocha", [
            make_item("Espresso", 4, "Drinks", 4.8, "Hot"),
            make_item("Iced Latte", 6, "Drinks", 4.2, "Cold"),
            make_item("Cheesecake", 9, "Desserts", 3.5, "Cakes"),
        ]),
    ]
    db[RESTAURANTS].insert_many(docs)
    return docs


@pytest.fixture
def registered_user(client):
    response = client.post("/register", json=TEST_USER)
    assert response.status_code == 201
    return dict(TEST_USER)


@pytest.fixture
def token(client, registered_user):
    response = client.post("/login", json={"email": registered_user["email"],
                                           "password": registered_user["password"]})
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}
