"""Add-on catalog lookups for pricing."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lodge.core.errors import StoreQueryFailure
from lodge.models import AddOn, AddOnCategory, AgeGroup
from lodge.schemas.pricing import AddonSelection
from lodge.services.pricing_service import AddonItem, to_money


async def list_active_addons(session: AsyncSession) -> list[AddOn]:
    """Return active catalog entries ordered for display."""
    stmt = (
        select(AddOn)
        .where(AddOn.is_active.is_(True))
        .order_by(AddOn.category, AddOn.name)
    )
    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise StoreQueryFailure(f"Add-on catalog query failed: {exc}") from exc
    return list(result.scalars().all())


async def resolve_addon_items(
    session: AsyncSession, selections: Sequence[AddonSelection]
) -> list[AddonItem]:
    """Turn catalog selections into priced whole-stay add-on items.

    Meals with an age breakdown become one item per age group so every item
    keeps ``total_price == quantity * unit_price``. Everything else is billed
    at the adult fee.
    """
    if not selections:
        return []

    requested = {selection.add_on_id for selection in selections}
    stmt = select(AddOn).where(
        AddOn.add_on_id.in_(requested), AddOn.is_active.is_(True)
    )
    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise StoreQueryFailure(f"Add-on lookup failed: {exc}") from exc
    catalog = {addon.add_on_id: addon for addon in result.scalars().all()}
    missing = sorted(requested - catalog.keys())
    if missing:
        raise ValueError(f"Unknown or inactive add-ons: {', '.join(missing)}")

    items: list[AddonItem] = []
    for selection in selections:
        addon = catalog[selection.add_on_id]
        if addon.category is AddOnCategory.MEAL and selection.age_breakdown:
            items.extend(_meal_items(addon, selection.age_breakdown))
            continue
        if selection.quantity <= 0:
            continue
        items.append(
            AddonItem(
                addon_id=addon.add_on_id,
                name=addon.name,
                quantity=selection.quantity,
                unit_price=to_money(addon.adult_fee),
                unit=addon.unit,
            )
        )
    return items


def _meal_items(addon: AddOn, breakdown: dict[AgeGroup, int]) -> list[AddonItem]:
    items: list[AddonItem] = []
    for group, quantity in breakdown.items():
        if quantity <= 0:
            continue
        items.append(
            AddonItem(
                addon_id=addon.add_on_id,
                name=f"{addon.name} ({AgeGroup(group).value})",
                quantity=quantity,
                unit_price=to_money(Decimal(addon.fee_for(group))),
                unit=addon.unit,
            )
        )
    return items
