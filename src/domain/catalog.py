"""
Package Catalog
===============

Static mapping from vehicle class to display metadata.  The catalog must be
total over :class:`PackageSlug`; a slug added to the enumeration without
metadata fails at import time rather than surfacing as a runtime ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass

from .enums import PackageSlug
from .errors import InvalidSelection


@dataclass(frozen=True)
class PackageMeta:
    slug: PackageSlug
    display_name: str
    description: str
    icon: str  # icon identifier understood by the client's icon set


PACKAGES_META: dict[PackageSlug, PackageMeta] = {
    PackageSlug.ECONOMY: PackageMeta(
        slug=PackageSlug.ECONOMY,
        display_name="Economy",
        description="Affordable everyday rides",
        icon="car",
    ),
    PackageSlug.COMFORT: PackageMeta(
        slug=PackageSlug.COMFORT,
        display_name="Comfort",
        description="Newer cars with extra legroom",
        icon="car-front",
    ),
    PackageSlug.PREMIUM: PackageMeta(
        slug=PackageSlug.PREMIUM,
        display_name="Premium",
        description="High-end vehicles with top-rated drivers",
        icon="crown",
    ),
    PackageSlug.XL: PackageMeta(
        slug=PackageSlug.XL,
        display_name="XL",
        description="Spacious rides for groups of up to 6",
        icon="bus",
    ),
}


def _check_exhaustive(catalog: dict[PackageSlug, PackageMeta]) -> None:
    missing = set(PackageSlug) - set(catalog)
    if missing:
        names = ", ".join(sorted(s.value for s in missing))
        raise RuntimeError(f"Package catalog has no metadata for: {names}")
    for slug, meta in catalog.items():
        if meta.slug is not slug or not meta.display_name:
            raise RuntimeError(f"Package catalog entry for {slug.value} is malformed")


_check_exhaustive(PACKAGES_META)


def lookup(slug: PackageSlug) -> PackageMeta:
    """Return the metadata for *slug*.  Total over ``PackageSlug``."""
    return PACKAGES_META[slug]


def all_packages() -> list[PackageMeta]:
    """Catalog entries in enumeration order."""
    return [PACKAGES_META[slug] for slug in PackageSlug]


def parse_slug(value: str | PackageSlug) -> PackageSlug:
    """Coerce a client-supplied value into a catalog key."""
    try:
        return PackageSlug(value)
    except ValueError:
        raise InvalidSelection(f"Unknown package: {value!r}") from None
