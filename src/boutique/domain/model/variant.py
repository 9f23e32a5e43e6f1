"""Variant names and variant keys.

A product variant (a color or style option) has been stored under two
shapes over time: a single canonical string, or a per-locale record such
as ``{"ar": ..., "fr": ..., "en": ...}``.  Both are modelled as a tagged
union, and ``names_match`` is the one equality used everywhere a variant
is looked up by name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

DEFAULT_LOCALES: tuple[str, ...] = ("ar", "fr", "en")

# Snapshot name used when an order line does not name a variant ("original").
PLACEHOLDER_VARIANT_NAME = "أصلي"


@dataclass(frozen=True)
class PlainName:
    text: str

    def forms(self) -> tuple[str, ...]:
        return (self.text,) if self.text else ()


@dataclass(frozen=True)
class LocalizedName:
    """A variant name with one text per locale.

    ``translations`` is kept as a sorted tuple of ``(locale, text)`` pairs
    so the name stays hashable.
    """

    translations: tuple[tuple[str, str], ...]

    @staticmethod
    def of(mapping: Mapping[str, Any]) -> LocalizedName:
        pairs = {
            str(locale): str(text).strip()
            for locale, text in mapping.items()
            if text is not None and str(text).strip()
        }
        return LocalizedName(tuple(sorted(pairs.items())))

    def get(self, locale: str) -> str | None:
        for key, text in self.translations:
            if key == locale:
                return text
        return None

    def forms(self) -> tuple[str, ...]:
        return tuple(text for _, text in self.translations)

    def as_dict(self) -> dict[str, str]:
        return dict(self.translations)


VariantName = Union[PlainName, LocalizedName]


def variant_name_from_raw(raw: Any) -> VariantName:
    """Build a VariantName from a stored or requested value.

    Accepts a string, a locale mapping, an existing VariantName, or nothing.
    """
    if isinstance(raw, (PlainName, LocalizedName)):
        return raw
    if raw is None:
        return PlainName("")
    if isinstance(raw, Mapping):
        return LocalizedName.of(raw)
    return PlainName(str(raw).strip())


def names_match(stored: VariantName, wanted: str | None) -> bool:
    """True if *wanted* equals the stored name, or any of its locale forms.

    Comparison is exact and case-sensitive once surrounding whitespace is
    trimmed.  An empty *wanted* never matches.
    """
    if not wanted or not wanted.strip():
        return False
    return wanted.strip() in stored.forms()


def display_name(
    name: VariantName,
    locales: tuple[str, ...] = DEFAULT_LOCALES,
    fallback: str = "",
) -> str:
    """Pick the text to show for a variant name, following *locales*."""
    if isinstance(name, PlainName):
        return name.text or fallback
    for locale in locales:
        text = name.get(locale)
        if text:
            return text
    forms = name.forms()
    return forms[0] if forms else fallback


@dataclass(frozen=True)
class VariantKey:
    """The signals used to find a variant: identifier, image, name.

    Derived from requests and order-line snapshots; never stored on a
    product.
    """

    variant_id: str | None = None
    image: str | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        # Blank signals are the same as absent ones.
        for attr in ("variant_id", "image", "name"):
            value = getattr(self, attr)
            if value is not None:
                value = str(value).strip() or None
                object.__setattr__(self, attr, value)

    @property
    def is_empty(self) -> bool:
        return not (self.variant_id or self.image or self.name)

    @staticmethod
    def from_raw(
        raw: Mapping[str, Any] | None,
        locales: tuple[str, ...] = DEFAULT_LOCALES,
    ) -> VariantKey:
        """Build a key from a request fragment.

        Understands both ``{"id", "image", "name"}`` and the storefront's
        ``{"_id", "image", "colorName"}`` shapes; a localized name is
        reduced to its preferred form since stored localized names match
        on any form.
        """
        if not raw:
            return VariantKey()
        raw_name = raw.get("name", raw.get("colorName"))
        name = display_name(variant_name_from_raw(raw_name), locales) or None
        return VariantKey(
            variant_id=raw.get("id", raw.get("variantId", raw.get("_id"))),
            image=raw.get("image"),
            name=name,
        )
