"""
Menu Service

Categories and items live in two tables joined by ``menu_items.category_id``.
Renaming a category is a plain UPDATE and deleting one removes its items.
"""

import logging

from sqlalchemy import select, func, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bellavista.core.exceptions import Conflict, NotFound, ValidationFailed
from bellavista.models import MenuCategory, MenuItem
from bellavista.schemas import (
    MenuCategoryCreate,
    MenuCategoryUpdate,
    MenuItemCreate,
    MenuItemUpdate,
)

logger = logging.getLogger(__name__)


# =============================================================================
# PUBLIC MENU
# =============================================================================

async def public_menu(db: AsyncSession) -> list[dict]:
    """Active categories in display order, each with its available items."""
    result = await db.execute(
        select(MenuCategory)
        .where(MenuCategory.is_active.is_(True))
        .options(selectinload(MenuCategory.items))
        .order_by(MenuCategory.display_order, MenuCategory.name)
    )
    return [
        {
            "id": category.id,
            "name": category.name,
            "description": category.description,
            "display_order": category.display_order,
            "items": [item for item in category.items if item.is_available],
        }
        for category in result.scalars().unique().all()
    ]


async def featured_items(db: AsyncSession, limit: int = 6) -> list[MenuItem]:
    result = await db.execute(
        select(MenuItem)
        .join(MenuItem.category)
        .where(
            MenuItem.is_featured.is_(True),
            MenuItem.is_available.is_(True),
            MenuCategory.is_active.is_(True),
        )
        .order_by(MenuItem.display_order, MenuItem.name)
        .limit(limit)
    )
    return list(result.scalars().unique().all())


# =============================================================================
# CATEGORIES
# =============================================================================

async def list_categories(db: AsyncSession) -> list[dict]:
    item_count = (
        select(MenuItem.category_id, func.count(MenuItem.id).label("item_count"))
        .group_by(MenuItem.category_id)
        .subquery()
    )
    result = await db.execute(
        select(MenuCategory, func.coalesce(item_count.c.item_count, 0))
        .outerjoin(item_count, item_count.c.category_id == MenuCategory.id)
        .order_by(MenuCategory.display_order, MenuCategory.name)
    )
    return [
        {
            "id": category.id,
            "name": category.name,
            "description": category.description,
            "display_order": category.display_order,
            "is_active": category.is_active,
            "item_count": count,
        }
        for category, count in result.all()
    ]


async def get_category(db: AsyncSession, category_id: str) -> MenuCategory:
    category = await db.get(MenuCategory, category_id)
    if category is None:
        raise NotFound("Category not found")
    return category


async def _commit_unique(db: AsyncSession, name: str) -> None:
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict(f"A category named '{name}' already exists")


async def create_category(db: AsyncSession, data: MenuCategoryCreate) -> MenuCategory:
    category = MenuCategory(**data.model_dump())
    db.add(category)
    await _commit_unique(db, data.name)
    await db.refresh(category)
    logger.info(f"Menu category created: {category.name}")
    return category


async def update_category(
    db: AsyncSession,
    category_id: str,
    data: MenuCategoryUpdate,
) -> MenuCategory:
    category = await get_category(db, category_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(category, field, value)
    await _commit_unique(db, changes.get("name", category.name))
    await db.refresh(category)
    logger.info(f"Menu category updated: {category.name}")
    return category


async def delete_category(db: AsyncSession, category_id: str) -> int:
    """Delete a category and its items. Returns the number of items removed."""
    category = await get_category(db, category_id)
    removed = await db.execute(delete(MenuItem).where(MenuItem.category_id == category_id))
    await db.delete(category)
    await db.commit()
    logger.info(f"Menu category deleted: {category.name} ({removed.rowcount} items)")
    return removed.rowcount


# =============================================================================
# ITEMS
# =============================================================================

async def list_items(db: AsyncSession) -> list[MenuItem]:
    result = await db.execute(
        select(MenuItem)
        .join(MenuItem.category)
        .order_by(MenuCategory.display_order, MenuItem.display_order, MenuItem.name)
    )
    return list(result.scalars().unique().all())


async def get_item(db: AsyncSession, item_id: str) -> MenuItem:
    result = await db.execute(select(MenuItem).where(MenuItem.id == item_id))
    item = result.scalars().unique().one_or_none()
    if item is None:
        raise NotFound("Menu item not found")
    return item


async def create_item(db: AsyncSession, data: MenuItemCreate) -> MenuItem:
    if not data.category_id:
        raise ValidationFailed("Category ID is required")
    await get_category(db, data.category_id)

    item = MenuItem(**data.model_dump())
    db.add(item)
    await db.commit()
    logger.info(f"Menu item created: {item.name}")
    # Reload with its category joined
    db.expunge(item)
    return await get_item(db, item.id)


async def update_item(db: AsyncSession, item_id: str, data: MenuItemUpdate) -> MenuItem:
    item = await get_item(db, item_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "category_id" in changes:
        await get_category(db, changes["category_id"])
    for field, value in changes.items():
        setattr(item, field, value)
    await db.commit()
    logger.info(f"Menu item updated: {item.name}")
    db.expunge(item)
    return await get_item(db, item_id)


async def delete_item(db: AsyncSession, item_id: str) -> None:
    item = await get_item(db, item_id)
    await db.delete(item)
    await db.commit()
    logger.info(f"Menu item deleted: {item.name}")
