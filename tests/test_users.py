from database import USERS
from tests.conftest import TEST_USER

HOME = {
    "addressLine1": "221B Baker Street",
    "city": "London",
    "state": "Greater London",
    "postalCode": "NW1 6XE",
    "country": "UK",
    "coordinates": {"latitude": 51.5237, "longitude": -0.1585},
    "addressType": "Home",
}

CART = {
    "cartItems": [{"itemName": "Margherita", "quantity": 2, "price": 12}],
    "restaurant": "Pizza Hut",
    "specialInstructions": "Extra basil",
    "deliveryFee": 2.5,
}

ORDER = {
    "restaurantName": "Pizza Hut",
    "orderDateTime": "2024-05-01T19:30:00Z",
    "orderStatus": "placed",
    "totalAmountPaid": 26.5,
    "itemsOrdered": [{"itemName": "Margherita", "quantity": 2, "price": 12, "description": "thin crust"}],
    "paymentMethodUsed": "UPI",
}


def stored_user(db):
    return db[USERS].find_one({"email": TEST_USER["email"]})


def test_set_home_address(client, db, auth_headers):
    response = client.put("/user/address/home", headers=auth_headers, json=HOME)
    assert response.status_code == 200
    assert response.json()["city"] == "London"

    assert stored_user(db)["address"]["home"]["postalCode"] == "NW1 6XE"
    user = client.get("/user", headers=auth_headers).json()
    assert user["address"]["home"]["addressType"] == "Home"


def test_set_address_unknown_kind(client, auth_headers):
    response = client.put("/user/address/holiday", headers=auth_headers, json=HOME)
    assert response.status_code == 400


def test_set_address_invalid_type(client, auth_headers):
    response = client.put("/user/address/work", headers=auth_headers, json=dict(HOME, addressType="Office"))
    assert response.status_code == 400


def test_replace_cart(client, db, auth_headers):
    response = client.put("/user/cart", headers=auth_headers, json=CART)
    assert response.status_code == 200
    assert response.json()["cartLastUpdated"]

    replacement = {"cartItems": [{"itemName": "Espresso", "quantity": 1, "price": 4}], "restaurant": "Cafe Mocha"}
    response = client.put("/user/cart", headers=auth_headers, json=replacement)
    assert response.status_code == 200

    cart = stored_user(db)["cart"]
    assert cart["restaurant"] == "Cafe Mocha"
    assert cart["cartItems"] == [{"itemName": "Espresso", "quantity": 1, "price": 4}]
    assert "specialInstructions" not in cart
    assert "deliveryFee" not in cart


def test_cart_requires_token(client):
    response = client.put("/user/cart", json=CART)
    assert response.status_code == 401


def test_append_order(client, db, auth_headers):
    response = client.post("/user/orders", headers=auth_headers, json=ORDER)
    assert response.status_code == 201
    entry = response.json()
    assert entry["orderStatus"] == "placed"
    assert entry["paymentMethodUsed"] == "UPI"
    assert entry["orderId"]

    client.post("/user/orders", headers=auth_headers, json=dict(ORDER, orderStatus="delivered"))
    history = stored_user(db)["orderHistory"]
    assert [o["orderStatus"] for o in history] == ["placed", "delivered"]
    assert str(history[0]["orderId"]) == entry["orderId"]


def test_append_order_rejects_unknown_payment_method(client, db, auth_headers):
    response = client.post("/user/orders", headers=auth_headers, json=dict(ORDER, paymentMethodUsed="Bitcoin"))
    assert response.status_code == 400
    assert stored_user(db)["orderHistory"] == []
