"""
Menu search and the category tree shown on the browse screen.

Both read the ``restaurants`` collection through aggregation pipelines over
the flattened (restaurant x menu item) relation.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from pymongo.database import Database

from database import RESTAURANTS
from errors import NotFound

logger = logging.getLogger(__name__)


def _present(value: Any) -> bool:
    return value is not None and value != ""


def build_search_filter(text: Optional[str] = None,
                        category: Optional[str] = None,
                        sub_category: Optional[str] = None,
                        min_price: Optional[float] = None,
                        max_price: Optional[float] = None,
                        min_rating: Optional[float] = None) -> Dict[str, Any]:
    """
    Build a filter on ``menus.*`` from whichever parameters are present.

    ``text`` matches the item name as a case-insensitive substring; category
    and sub-category match exactly; the price bounds form a closed interval
    where either side may be left open; ``min_rating`` is inclusive.
    """
    filters: Dict[str, Any] = {}
    if _present(text):
        filters["menus.itemName"] = {"$regex": re.escape(text), "$options": "i"}
    if _present(category):
        filters["menus.category"] = category
    if _present(sub_category):
        filters["menus.subCategory"] = sub_category

    price_cond = {}
    if min_price is not None:
        price_cond["$gte"] = float(min_price)
    if max_price is not None:
        price_cond["$lte"] = float(max_price)
    if price_cond:
        filters["menus.price"] = price_cond

    if min_rating is not None:
        filters["menus.rating"] = {"$gte": float(min_rating)}
    return filters


def search_pipeline(filters: Dict[str, Any]) -> List[dict]:
    return [
        # drop restaurants with no candidate items before unwinding
        {"$match": filters},
        {"$unwind": "$menus"},
        {"$match": filters},
        {"$project": {
            "_id": 0,
            "restaurantName": "$name",
            "itemName": "$menus.itemName",
            "price": "$menus.price",
            "category": "$menus.category",
            "subCategory": "$menus.subCategory",
            "image": "$menus.image",
            "rating": "$menus.rating",
        }},
    ]


def search_items(db: Database, **params: Any) -> List[dict]:
    """Return one flattened record per matching menu item, or raise NotFound."""
    filters = build_search_filter(**params)
    items = list(db[RESTAURANTS].aggregate(search_pipeline(filters)))
    logger.debug("Search %s matched %d items", filters, len(items))
    if not items:
        raise NotFound("No items found for the search query")
    return items


CATEGORY_TRIPLES_PIPELINE = [
    {"$unwind": "$menus"},
    {"$group": {
        "_id": {
            "restaurant": "$name",
            "category": "$menus.category",
            "subCategory": "$menus.subCategory",
        },
    }},
]


def fold_category_tree(triples: List[dict]) -> List[dict]:
    """
    Fold distinct (restaurant, category, subCategory) rows into a tree.

    Sub-categories are collected per category, so a category only lists the
    sub-categories actually seen under it.
    """
    tree: Dict[str, Dict[str, set]] = {}
    for row in triples:
        key = row["_id"]
        restaurant = key.get("restaurant")
        category = key.get("category")
        if restaurant is None or category is None:
            continue
        subs = tree.setdefault(restaurant, {}).setdefault(category, set())
        sub_category = key.get("subCategory")
        if sub_category is not None:
            subs.add(sub_category)

    return [
        {
            "restaurantName": restaurant,
            "categories": [
                {"category": category, "subCategories": sorted(subs)}
                for category, subs in sorted(categories.items())
            ],
        }
        for restaurant, categories in sorted(tree.items())
    ]


def build_category_tree(db: Database) -> List[dict]:
    triples = list(db[RESTAURANTS].aggregate(CATEGORY_TRIPLES_PIPELINE))
    return fold_category_tree(triples)
