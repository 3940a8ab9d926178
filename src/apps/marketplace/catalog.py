from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MarketplaceItem:
    id: str
    name: str
    points_cost: int
    category: str
    vendor: str


CATALOG: dict[str, MarketplaceItem] = {
    item.id: item
    for item in (
        MarketplaceItem("1", "Apple AirPods Pro (2nd Gen)", 2500, "Audio", "Apple"),
        MarketplaceItem("2", "iPhone 15 Pro", 12000, "Smartphones", "Apple"),
        MarketplaceItem("3", "Sony PlayStation 5", 5500, "Gaming", "Sony"),
        MarketplaceItem("4", "MacBook Air M3", 15000, "Laptops", "Apple"),
        MarketplaceItem("5", "Samsung Galaxy Watch 6", 3200, "Wearables", "Samsung"),
        MarketplaceItem("6", "Nintendo Switch OLED", 3800, "Gaming", "Nintendo"),
        MarketplaceItem("7", 'iPad Pro 12.9"', 11000, "Tablets", "Apple"),
        MarketplaceItem("8", "Bose QuietComfort Headphones", 3500, "Audio", "Bose"),
    )
}


def get_item(item_id) -> MarketplaceItem | None:
    return CATALOG.get(str(item_id))


def all_items() -> list[MarketplaceItem]:
    return list(CATALOG.values())
