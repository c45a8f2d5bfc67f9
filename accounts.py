"""
User accounts: registration, credential checks and writes to the user
document (secret, addresses, cart, order history).
"""

import logging
from typing import Any, Dict

from bson import ObjectId
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from config import Settings
from database import USERS, create_document, find_one, now_utc, serialize, to_object_id
from errors import Conflict, InvalidCredentials, NotFound, UserNotRegistered
from schemas import Address, Cart, NewOrder, RegisterBody, User
from security import get_password_hash, verify_password

logger = logging.getLogger(__name__)


def _user_oid(user_id: str) -> ObjectId:
    oid = to_object_id(user_id)
    if oid is None:
        raise NotFound("User not found")
    return oid


def register(db: Database, settings: Settings, body: RegisterBody) -> str:
    if find_one(db, USERS, {"email": body.email}):
        raise Conflict("User already exists")
    if find_one(db, USERS, {"phoneNumber": body.phone_number}):
        raise Conflict("Phone number already registered")

    user = User(
        full_name=body.full_name,
        phone_number=body.phone_number,
        email=body.email,
        password=get_password_hash(body.password, settings.bcrypt_rounds),
    )
    try:
        user_id = create_document(db, USERS, user)
    except DuplicateKeyError:
        # lost a race with a concurrent registration
        raise Conflict("User already exists")
    logger.info("Registered user %s", user_id)
    return user_id


def authenticate(db: Database, email: str, password: str) -> dict:
    user = find_one(db, USERS, {"email": email})
    if not user:
        logger.info("Login failed, unknown email %s", email)
        raise UserNotRegistered("User Not Registered")
    if not verify_password(password, user.get("password")):
        logger.info("Login failed, bad password for %s", email)
        raise InvalidCredentials("Invalid credentials")
    return user


def get_user(db: Database, user_id: str) -> dict:
    user = find_one(db, USERS, {"_id": _user_oid(user_id)}, {"password": 0})
    if not user:
        raise NotFound("User not found")
    return serialize(user)


def update_user(db: Database, settings: Settings, user_id: str, changes: Dict[str, Any]) -> None:
    """
    Apply a ``$set`` to a user document.

    A new ``password`` is hashed here, so every write path that touches the
    secret stores it hashed exactly once.
    """
    changes = dict(changes)
    if "password" in changes:
        changes["password"] = get_password_hash(changes["password"], settings.bcrypt_rounds)
    changes["updatedAt"] = now_utc()
    result = db[USERS].update_one({"_id": _user_oid(user_id)}, {"$set": changes})
    if result.matched_count == 0:
        raise NotFound("User not found")


def change_password(db: Database, settings: Settings, user_id: str,
                    current_password: str, new_password: str) -> None:
    user = find_one(db, USERS, {"_id": _user_oid(user_id)}, {"password": 1})
    if not user:
        raise NotFound("User not found")
    if not verify_password(current_password, user.get("password")):
        raise InvalidCredentials("Current password is incorrect")
    update_user(db, settings, user_id, {"password": new_password})
    logger.info("Password changed for user %s", user_id)


def set_address(db: Database, settings: Settings, user_id: str, kind: str, address: Address) -> dict:
    doc = address.to_document()
    update_user(db, settings, user_id, {f"address.{kind}": doc})
    return doc


def replace_cart(db: Database, settings: Settings, user_id: str, cart: Cart) -> dict:
    doc = cart.model_copy(update={"cart_last_updated": now_utc()}).to_document()
    update_user(db, settings, user_id, {"cart": doc})
    return doc


def append_order(db: Database, user_id: str, order: NewOrder) -> dict:
    entry = order.to_document()
    entry["orderId"] = ObjectId()
    result = db[USERS].update_one(
        {"_id": _user_oid(user_id)},
        {"$push": {"orderHistory": entry}, "$set": {"updatedAt": now_utc()}},
    )
    if result.matched_count == 0:
        raise NotFound("User not found")
    logger.info("Order %s appended for user %s", entry["orderId"], user_id)
    return serialize(entry)
