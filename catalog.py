import logging
from typing import List, Tuple

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database

from database import RESTAURANTS, get_documents, serialize
from errors import NotFound
from schemas import MenuItem

logger = logging.getLogger(__name__)


def list_restaurants(db: Database) -> List[dict]:
    return get_documents(db, RESTAURANTS)


def add_menu_item(db: Database, restaurant_name: str, item: MenuItem) -> Tuple[dict, int]:
    """
    Append ``item`` to the menu of the restaurant called ``restaurant_name``.

    Names are not unique: the lookup is exact, case-sensitive and takes the
    first restaurant in natural storage order. Returns the stored item and its
    zero-based position in the menu.
    """
    doc = item.to_document()
    doc["_id"] = ObjectId()
    restaurant = db[RESTAURANTS].find_one_and_update(
        {"name": restaurant_name},
        {"$push": {"menus": doc}},
        projection={"menus": 1},
        return_document=ReturnDocument.AFTER,
    )
    if restaurant is None:
        raise NotFound("Restaurant not found")

    menus = restaurant.get("menus", [])
    position = next(i for i, m in enumerate(menus) if m.get("_id") == doc["_id"])
    logger.info("Added %r to %r at position %d", item.item_name, restaurant_name, position)
    return serialize(menus[position]), position
