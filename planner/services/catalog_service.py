"""Products and team members objectives are planned for."""

import logging
import re

from planner.core import db_client
from planner.domain.objective import Member, Product


logger = logging.getLogger(__name__)

PRODUCTS = "products"
MEMBERS = "members"


async def get_products() -> list[Product]:
    """Get all products ordered by name."""
    records = await db_client.list_all_records(collection=PRODUCTS, sort="name")
    return [Product(**record) for record in records]


def _slug_words(text: str) -> str:
    """'Atlas / Mobile-App' -> 'atlas mobile app'."""
    return " ".join(re.sub(r"[^a-z0-9]+", " ", text.lower()).split())


def match_product(products: list[Product], search: str) -> Product | None:
    """Pick the product a shared link names, trying looser strategies in turn.

    Strategies, first hit wins: case-insensitive name, name with punctuation
    folded to spaces, either name containing the other, a word in common,
    and finally the product id.
    """
    wanted = search.strip().lower()
    if not wanted:
        return None

    strategies = (
        lambda p: p.name.lower() == wanted,
        lambda p: _slug_words(p.name) == _slug_words(wanted),
        lambda p: wanted in p.name.lower() or p.name.lower() in wanted,
        lambda p: bool(set(wanted.split()) & set(p.name.lower().split())),
        lambda p: p.id.lower() == wanted,
    )
    for matches in strategies:
        for product in products:
            if matches(product):
                return product
    return None


async def find_product(search: str) -> Product | None:
    """Find a product by name or id, as written in a shared-plan link."""
    product = match_product(await get_products(), search)
    if product is None:
        logger.info("No product matches %r", search)
    return product


async def create_product(*, name: str) -> Product:
    """Create a product, returning the existing one when the name is taken.

    Args:
        name: Product name (surrounding whitespace is ignored)

    Raises:
        ValueError: If the name is blank
    """
    name = name.strip()
    if not name:
        raise ValueError("Product name must not be empty")

    existing = await db_client.get_first_record(
        collection=PRODUCTS,
        filter_query=f'name = "{db_client.sanitize_param(name)}"',
    )
    if existing:
        return Product(**existing)

    record = await db_client.create_record(collection=PRODUCTS, data={"name": name})
    logger.info("Created product", extra={"product_id": record["id"], "product_name": name})
    return Product(**record)


async def get_members() -> list[Member]:
    """Get all team members ordered by name."""
    records = await db_client.list_all_records(collection=MEMBERS, sort="name")
    return [Member(**record) for record in records]


def _initials(name: str) -> str:
    return "".join(part[0] for part in name.split()[:2]).upper()


async def create_member(*, name: str, role: str = "", avatar: str = "") -> Member:
    """Create a team member; initials are derived from the name."""
    name = name.strip()
    if not name:
        raise ValueError("Member name must not be empty")

    record = await db_client.create_record(
        collection=MEMBERS,
        data={"name": name, "role": role, "avatar": avatar, "initials": _initials(name)},
    )
    logger.info("Created member", extra={"member_id": record["id"]})
    return Member(**record)
