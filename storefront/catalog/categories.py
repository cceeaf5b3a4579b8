"""Catalog categories and keyword-based categorization."""

import re

NAILS_BEAUTY = "Nails & Beauty"
CAPS_ACCESSORIES = "Caps & Accessories"
FASHION_CLOTHING = "Fashion & Clothing"
HOME_DECOR = "Home & Decor"
KITCHEN_DINING = "Kitchen & Dining"
ELECTRONICS = "Electronics"

CATEGORIES = [
    NAILS_BEAUTY,
    CAPS_ACCESSORIES,
    FASHION_CLOTHING,
    HOME_DECOR,
    KITCHEN_DINING,
    ELECTRONICS,
]

# Whole-word keywords for titles; checked in order, first match wins
_TITLE_KEYWORDS: list[tuple[str, list[str]]] = [
    (NAILS_BEAUTY, [
        "nail", "manicure", "pedicure", "lipstick", "makeup", "beauty",
        "cosmetic", "eyeliner", "mascara", "serum",
    ]),
    (CAPS_ACCESSORIES, [
        "cap", "hat", "beanie", "earring", "bracelet", "necklace", "jewellery",
        "jewelry", "ring", "watch", "wallet", "bag", "sunglass", "sunglasses",
        "scrunchie", "accessory", "accessories",
    ]),
    (FASHION_CLOTHING, [
        "shirt", "t-shirt", "tshirt", "hoodie", "sweatshirt", "kurti", "kurta",
        "dress", "saree", "sari", "jeans", "top", "jacket", "trouser", "legging",
        "skirt", "dupatta",
    ]),
    (HOME_DECOR, [
        "lamp", "light", "led", "decor", "cushion", "curtain", "vase", "frame",
        "wall", "candle", "planter", "clock",
    ]),
    (KITCHEN_DINING, [
        "bottle", "jar", "mug", "cup", "tumbler", "sipper", "kitchen", "plate",
        "bowl", "spoon", "lunchbox", "flask", "container",
    ]),
    (ELECTRONICS, [
        "phone", "mobile", "earphone", "earphones", "headphone", "headphones",
        "earbuds", "charger", "cable", "speaker", "bluetooth", "usb",
        "powerbank", "electronic", "electronics",
    ]),
]

_TITLE_PATTERNS = [
    (category, re.compile(r"\b(?:" + "|".join(re.escape(k) for k in keywords) + r")s?\b", re.IGNORECASE))
    for category, keywords in _TITLE_KEYWORDS
]

# Substring rules for marketplace sub-sub-category names
_MARKETPLACE_RULES: list[tuple[str, tuple[str, ...]]] = [
    (NAILS_BEAUTY, ("nail",)),
    (CAPS_ACCESSORIES, ("cap", "hat", "beanie", "accessories")),
    (FASHION_CLOTHING, ("sweatshirt", "hoodie", "shirt", "kurti", "dress", "fashion")),
    (HOME_DECOR, ("lamp", "light", "led", "decor", "home")),
    (KITCHEN_DINING, ("bottle", "jar", "mug", "cup", "tumbler", "sipper", "kitchen")),
]

_EMOJI = {
    NAILS_BEAUTY: "💅",
    CAPS_ACCESSORIES: "🧢",
    FASHION_CLOTHING: "👗",
    HOME_DECOR: "🏠",
    KITCHEN_DINING: "🍽️",
    ELECTRONICS: "📱",
}

_GIF_BASE = "https://fonts.gstatic.com/s/e/notoemoji/latest/"
_GIF = {
    NAILS_BEAUTY: "1f485",
    CAPS_ACCESSORIES: "1f48e",
    FASHION_CLOTHING: "1f49c",
    HOME_DECOR: "1f4a1",
    KITCHEN_DINING: "2615",
    ELECTRONICS: "1f4ab",
}


def auto_category(title: str | None) -> str:
    """Guess a catalog category from a product title; empty string when unsure."""
    if not title:
        return ""
    for category, pattern in _TITLE_PATTERNS:
        if pattern.search(title):
            return category
    return ""


def map_marketplace_category(name: str | None) -> str:
    """Map a marketplace sub-sub-category name onto a catalog category."""
    lowered = (name or "").lower()
    for category, fragments in _MARKETPLACE_RULES:
        if any(fragment in lowered for fragment in fragments):
            return category
    return auto_category(name)


def category_emoji(category: str) -> str:
    return _EMOJI.get(category, "📦")


def category_gif(category: str) -> str:
    return f"{_GIF_BASE}{_GIF.get(category, '1f381')}/512.gif"
