"""Tests for card design models."""

import pytest

from cardreveal.models.card_design import (
    CardDesign,
    DesignType,
    GradientColors,
    normalize_card_id,
)


class TestNormalizeCardId:
    def test_strips_whitespace(self) -> None:
        assert normalize_card_id("  abc ") == "abc"

    def test_stringifies_non_strings(self) -> None:
        assert normalize_card_id(42) == "42"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_ids_normalize_to_none(self, value) -> None:
        assert normalize_card_id(value) is None


class TestFromRecord:
    def test_parses_api_record(self) -> None:
        """Mongo-style records with camelCase keys are parsed."""
        card = CardDesign.from_record(
            {
                "_id": "65f0c1",
                "name": "Sunrise",
                "designType": "gradient",
                "gradientColors": {"primary": "#f66633", "secondary": "#ff8c64"},
                "textColor": "#FFFFFF",
                "backCardColor": "#000000",
                "backCardImageUrl": "/uploads/back.png",
            }
        )

        assert card is not None
        assert card.id == "65f0c1"
        assert card.name == "Sunrise"
        assert card.design_type is DesignType.GRADIENT
        assert card.gradient_colors == GradientColors(primary="#f66633", secondary="#ff8c64")
        assert card.back_color == "#000000"
        assert card.back_image_url == "/uploads/back.png"

    def test_accepts_plain_id_key(self) -> None:
        card = CardDesign.from_record({"id": "x1"})

        assert card == CardDesign(id="x1")

    def test_record_without_id_is_rejected(self) -> None:
        assert CardDesign.from_record({"name": "Nameless"}) is None

    def test_null_underscore_id_falls_back_to_id(self) -> None:
        card = CardDesign.from_record({"_id": None, "id": "x1", "name": "Amber"})

        assert card == CardDesign(id="x1", name="Amber")

    @pytest.mark.parametrize("record", ["a", 42, None, ["a"]])
    def test_non_mapping_record_is_rejected(self, record) -> None:
        assert CardDesign.from_record(record) is None

    def test_unknown_design_type_left_to_renderer(self) -> None:
        card = CardDesign.from_record({"_id": "x", "designType": "hologram"})

        assert card is not None
        assert card.design_type is None

    def test_empty_gradient_is_none(self) -> None:
        card = CardDesign.from_record({"_id": "x", "gradientColors": {}})

        assert card is not None
        assert card.gradient_colors is None


class TestMerge:
    def test_other_populated_fields_win(self) -> None:
        base = CardDesign(id="x", name="Old", solid_color="#111111")
        other = CardDesign(id="x", name="New")

        merged = base.merged_with(other)

        assert merged.name == "New"
        assert merged.solid_color == "#111111"

    def test_empty_other_returns_self(self) -> None:
        base = CardDesign(id="x", name="Kept")

        assert base.merged_with(CardDesign(id="x")) is base

    def test_populated_fields_excludes_id(self) -> None:
        card = CardDesign(id="x", name="N", text_color="#fff")

        assert card.populated_fields() == ("name", "text_color")

    def test_frozen(self) -> None:
        card = CardDesign(id="x")

        with pytest.raises(AttributeError):
            card.name = "changed"  # type: ignore[misc]


class TestToRecord:
    def test_serializes_camel_case(self) -> None:
        card = CardDesign(
            id="x",
            name="Ocean",
            design_type=DesignType.GRADIENT,
            gradient_colors=GradientColors(primary="#000", secondary="#fff"),
            back_image_url="/back.png",
        )

        assert card.to_record() == {
            "_id": "x",
            "name": "Ocean",
            "designType": "gradient",
            "gradientColors": {"primary": "#000", "secondary": "#fff"},
            "backImageUrl": "/back.png",
        }
