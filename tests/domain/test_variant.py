"""Unit tests for variant names and variant keys."""

from boutique.domain.model.variant import (
    LocalizedName,
    PlainName,
    VariantKey,
    display_name,
    names_match,
    variant_name_from_raw,
)


class TestVariantNameFromRaw:

    def test_string_becomes_plain_name(self):
        assert variant_name_from_raw("  Red ") == PlainName("Red")

    def test_mapping_becomes_localized_name(self):
        name = variant_name_from_raw({"ar": "أحمر", "fr": "Rouge", "en": "Red"})
        assert isinstance(name, LocalizedName)
        assert name.get("fr") == "Rouge"

    def test_blank_translations_dropped(self):
        name = variant_name_from_raw({"ar": "", "fr": "Rouge", "en": None})
        assert name.forms() == ("Rouge",)

    def test_none_becomes_empty_plain_name(self):
        assert variant_name_from_raw(None).forms() == ()


class TestNamesMatch:

    def test_plain_exact_match(self):
        assert names_match(PlainName("Red"), "Red")

    def test_surrounding_whitespace_ignored(self):
        assert names_match(PlainName("Red"), "  Red ")

    def test_case_sensitive(self):
        assert not names_match(PlainName("Red"), "red")

    def test_any_locale_form_matches(self):
        name = LocalizedName.of({"ar": "أحمر", "fr": "Rouge", "en": "Red"})
        assert names_match(name, "أحمر")
        assert names_match(name, "Rouge")
        assert names_match(name, "Red")
        assert not names_match(name, "Blue")

    def test_empty_wanted_never_matches(self):
        assert not names_match(PlainName(""), "")
        assert not names_match(PlainName("Red"), None)
        assert not names_match(PlainName("Red"), "   ")


class TestDisplayName:

    def test_plain(self):
        assert display_name(PlainName("Red")) == "Red"

    def test_follows_locale_preference(self):
        name = LocalizedName.of({"fr": "Rouge", "en": "Red", "ar": "أحمر"})
        assert display_name(name) == "أحمر"
        assert display_name(name, ("en", "fr")) == "Red"

    def test_falls_back_to_any_form(self):
        name = LocalizedName.of({"de": "Rot"})
        assert display_name(name, ("ar", "fr")) == "Rot"

    def test_fallback_for_empty(self):
        assert display_name(PlainName(""), fallback="?") == "?"


class TestVariantKey:

    def test_blank_signals_are_absent(self):
        key = VariantKey(variant_id=" ", image="", name=None)
        assert key.variant_id is None
        assert key.image is None
        assert key.is_empty

    def test_from_raw_understands_storefront_shape(self):
        key = VariantKey.from_raw({"_id": "v1", "image": "/red.png", "colorName": "Red"})
        assert key == VariantKey(variant_id="v1", image="/red.png", name="Red")

    def test_from_raw_reduces_localized_name(self):
        key = VariantKey.from_raw({"colorName": {"en": "Red", "fr": "Rouge"}})
        assert key.name == "Rouge"

    def test_from_raw_none(self):
        assert VariantKey.from_raw(None).is_empty
