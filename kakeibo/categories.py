from enum import Enum

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "食費",
    "交通費",
    "住居費",
    "光熱費",
    "通信費",
    "娯楽費",
    "医療費",
    "衣服費",
    "日用品",
    "投資",
    "教育費",
    "その他",
)

OTHER_CATEGORY = "その他"

CATEGORY_COLORS: dict[str, str] = {
    "食費": "#FF6B35",
    "交通費": "#4A90E2",
    "住居費": "#FF8C42",
    "光熱費": "#2ECC71",
    "通信費": "#3B82F6",
    "娯楽費": "#9B59B6",
    "医療費": "#E74C3C",
    "衣服費": "#EC4899",
    "日用品": "#10B981",
    "投資": "#F59E0B",
    "教育費": "#1E40AF",
    "その他": "#F39C12",
}

# Used for labels outside CATEGORY_COLORS, picked by index
FALLBACK_PALETTE: tuple[str, ...] = (
    "#94A3B8",
    "#06B6D4",
    "#4A90E2",
    "#84CC16",
    "#A855F7",
    "#F43F5E",
    "#14B8A6",
    "#EAB308",
)


def color_for(category: str, fallback_index: int = 0) -> str:
    """Return the display color for a category.

    Known categories always get their assigned color. Unknown ones get a
    palette entry chosen by ``fallback_index``, so callers that want the same
    color on every render must pass a stable index (e.g. the category's
    position in a sorted list).
    """
    color = CATEGORY_COLORS.get(category)
    if color is not None:
        return color
    return FALLBACK_PALETTE[fallback_index % len(FALLBACK_PALETTE)]


def category_rank(category: str) -> int:
    """Position in EXPENSE_CATEGORIES; unknown labels rank after all known ones."""
    try:
        return EXPENSE_CATEGORIES.index(category)
    except ValueError:
        return len(EXPENSE_CATEGORIES)


class CategoryIcon(str, Enum):
    UTENSILS = "utensils"
    BUS = "bus"
    HOME = "home"
    ZAP = "zap"
    PHONE = "phone"
    GAMEPAD = "gamepad"
    HEART_PULSE = "heart-pulse"
    SHIRT = "shirt"
    BASKET = "basket"
    TRENDING_UP = "trending-up"
    BOOK = "book"
    OTHER = "more-horizontal"


CATEGORY_ICONS: dict[str, CategoryIcon] = {
    "食費": CategoryIcon.UTENSILS,
    "交通費": CategoryIcon.BUS,
    "住居費": CategoryIcon.HOME,
    "光熱費": CategoryIcon.ZAP,
    "通信費": CategoryIcon.PHONE,
    "娯楽費": CategoryIcon.GAMEPAD,
    "医療費": CategoryIcon.HEART_PULSE,
    "衣服費": CategoryIcon.SHIRT,
    "日用品": CategoryIcon.BASKET,
    "投資": CategoryIcon.TRENDING_UP,
    "教育費": CategoryIcon.BOOK,
    "その他": CategoryIcon.OTHER,
}


def icon_for(category: str) -> CategoryIcon:
    return CATEGORY_ICONS.get(category, CategoryIcon.OTHER)
