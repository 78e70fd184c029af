"""
Card Design Models.

A card design is a collectible visual skin. The same design reaches the
client through several channels (claim response, reward pool, cached
catalog) with different subsets of fields populated.

INVARIANTS:
- Identity is the normalized id string, never field contents
- A CardDesign always carries an id (records without one are rejected)
- All models are frozen (immutable after construction)
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any


class DesignType(str, Enum):
    """Rendering strategy for a card design."""

    IMAGE = "image"
    SOLID = "solid"
    GRADIENT = "gradient"
    REWARD = "reward"


def normalize_card_id(value: Any) -> str | None:
    """
    Normalize a raw identifier to its comparable string form.

    Returns None for missing, empty or whitespace-only identifiers.
    """
    if value is None:
        return None
    normalized = str(value).strip()
    return normalized or None


def record_id(record: Mapping[str, Any]) -> str | None:
    """Normalized `_id` of an API record, falling back to `id`."""
    for key in ("_id", "id"):
        card_id = normalize_card_id(record.get(key))
        if card_id is not None:
            return card_id
    return None


def _parse_design_type(value: Any) -> DesignType | None:
    if value is None:
        return None
    try:
        return DesignType(str(value))
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class GradientColors:
    """Two-stop gradient used by gradient designs."""

    primary: str | None = None
    secondary: str | None = None

    @classmethod
    def from_record(cls, record: Any) -> "GradientColors | None":
        if not isinstance(record, Mapping):
            return None
        primary = record.get("primary")
        secondary = record.get("secondary")
        if primary is None and secondary is None:
            return None
        return cls(primary=primary, secondary=secondary)

    def to_record(self) -> dict[str, str | None]:
        return {"primary": self.primary, "secondary": self.secondary}


# API key -> attribute name. First matching key wins.
_RECORD_KEYS: dict[str, tuple[str, ...]] = {
    "name": ("name",),
    "description": ("description",),
    "image_url": ("imageUrl",),
    "mobile_image_url": ("mobileImageUrl",),
    "back_image_url": ("backImageUrl", "backCardImageUrl"),
    "solid_color": ("solidColor",),
    "back_color": ("backColor", "backCardColor"),
    "text_color": ("textColor",),
}


@dataclass(frozen=True, slots=True)
class CardDesign:
    """
    A collectible card skin.

    Every field except `id` is optional: pool entries are often bare ids,
    while catalog and claim records are fully populated.

    Attributes:
        id: Normalized identifier, stable across representations
        name: Display name
        description: Display description
        design_type: Rendering strategy (None lets the renderer decide)
        image_url: Front image, used by image/reward designs
        mobile_image_url: Front image for small screens
        back_image_url: Back-of-card image
        solid_color: Fill for solid designs
        gradient_colors: Stops for gradient designs
        back_color: Back-of-card fill
        text_color: Foreground text color (renderer applies the default)
    """

    id: str
    name: str | None = None
    description: str | None = None
    design_type: DesignType | None = None
    image_url: str | None = None
    mobile_image_url: str | None = None
    back_image_url: str | None = None
    solid_color: str | None = None
    gradient_colors: GradientColors | None = None
    back_color: str | None = None
    text_color: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "CardDesign | None":
        """
        Build a CardDesign from an API record.

        Accepts either `_id` or `id`. Returns None when the record is not a
        mapping or has no usable identifier.
        """
        if not isinstance(record, Mapping):
            return None
        card_id = record_id(record)
        if card_id is None:
            return None

        values: dict[str, Any] = {}
        for attr, keys in _RECORD_KEYS.items():
            for key in keys:
                if record.get(key) is not None:
                    values[attr] = record[key]
                    break

        return cls(
            id=card_id,
            design_type=_parse_design_type(record.get("designType")),
            gradient_colors=GradientColors.from_record(record.get("gradientColors")),
            **values,
        )

    def populated_fields(self) -> tuple[str, ...]:
        """Names of the non-identity fields that carry a value."""
        return tuple(
            f.name for f in fields(self) if f.name != "id" and getattr(self, f.name) is not None
        )

    def merged_with(self, other: "CardDesign") -> "CardDesign":
        """
        Overlay `other`'s populated fields onto this design.

        Fields `other` leaves empty keep this design's value. The id is
        never changed.
        """
        overrides = {name: getattr(other, name) for name in other.populated_fields()}
        if not overrides:
            return self
        return replace(self, **overrides)

    def to_record(self) -> dict[str, Any]:
        """Serialize to the camelCase shape the API uses."""
        record: dict[str, Any] = {"_id": self.id}
        for attr, keys in _RECORD_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                record[keys[0]] = value
        if self.design_type is not None:
            record["designType"] = self.design_type.value
        if self.gradient_colors is not None:
            record["gradientColors"] = self.gradient_colors.to_record()
        return record
