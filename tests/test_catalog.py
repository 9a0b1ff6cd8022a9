"""Unit tests for the vehicle class catalog."""

import pytest

from src.domain.catalog import (
    PACKAGES_META,
    PackageMeta,
    _check_exhaustive,
    all_packages,
    lookup,
    parse_slug,
)
from src.domain.enums import PackageSlug
from src.domain.errors import InvalidSelection


class TestCatalog:
    @pytest.mark.parametrize("slug", list(PackageSlug))
    def test_lookup_is_total(self, slug):
        meta = lookup(slug)
        assert meta.slug is slug
        assert meta.display_name
        assert meta.icon

    def test_all_packages_in_enum_order(self):
        assert [m.slug for m in all_packages()] == list(PackageSlug)

    def test_parse_slug_accepts_values(self):
        assert parse_slug("economy") is PackageSlug.ECONOMY

    def test_parse_slug_rejects_unknown(self):
        with pytest.raises(InvalidSelection):
            parse_slug("helicopter")

    def test_missing_entry_fails_definition_check(self):
        partial = dict(PACKAGES_META)
        del partial[PackageSlug.XL]
        with pytest.raises(RuntimeError, match="xl"):
            _check_exhaustive(partial)

    def test_mismatched_entry_fails_definition_check(self):
        broken = dict(PACKAGES_META)
        broken[PackageSlug.XL] = PackageMeta(
            slug=PackageSlug.ECONOMY, display_name="XL", description="", icon="bus"
        )
        with pytest.raises(RuntimeError):
            _check_exhaustive(broken)
