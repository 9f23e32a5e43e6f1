"""Domain service: VariantKey resolution.

Finds the single entry a variant key refers to, either among a product's
variants (to adjust stock) or among an order's line snapshots (to remove
or notify about a line).  Both use the same precedence:

1. exact match on the variant identifier, if the key carries one;
2. exact match on an image URL, if both sides expose a non-empty image;
3. exact, case-sensitive name match (any locale form of a stored name).

The first rule that matches decides.  A rule matching more than one entry
is ambiguous and resolves to nothing: a wrong-variant stock update is
worse than a failed, logged match.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

import structlog

from boutique.domain.model.variant import (
    PlainName,
    VariantKey,
    VariantName,
    names_match,
)

if TYPE_CHECKING:
    from boutique.domain.model.order import OrderLine
    from boutique.domain.model.product import ProductVariant

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class _Candidate:
    variant_id: str | None
    images: tuple[str, ...]
    name: VariantName


def resolve_variant(key: VariantKey, variants: Sequence[ProductVariant]) -> int | None:
    """Return the index of the variant *key* refers to, or None."""
    candidates = [
        _Candidate(variant_id=v.id, images=tuple(v.images), name=v.name)
        for v in variants
    ]
    return _resolve(key, candidates)


def resolve_line(
    key: VariantKey,
    product_id: str,
    lines: Sequence[OrderLine],
) -> int | None:
    """Return the index of the line of *product_id* that *key* refers to.

    Matching runs against each line's variant snapshot, not the live
    product.
    """
    positions = [i for i, line in enumerate(lines) if line.product_id == product_id]
    candidates = [
        _Candidate(
            variant_id=lines[i].variant.variant_id,
            images=(lines[i].variant.key_image,) if lines[i].variant.key_image else (),
            name=PlainName(lines[i].variant.name),
        )
        for i in positions
    ]
    index = _resolve(key, candidates)
    return positions[index] if index is not None else None


def _resolve(key: VariantKey, candidates: list[_Candidate]) -> int | None:
    rules = (
        ("id", key.variant_id, lambda c: c.variant_id is not None and c.variant_id == key.variant_id),
        ("image", key.image, lambda c: key.image in c.images),
        ("name", key.name, lambda c: names_match(c.name, key.name)),
    )
    for rule, signal, predicate in rules:
        if not signal:
            continue
        matches = [i for i, candidate in enumerate(candidates) if predicate(candidate)]
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            logger.warning(
                "variant_key_ambiguous",
                rule=rule,
                signal=signal,
                matches=len(matches),
            )
            return None
    return None
