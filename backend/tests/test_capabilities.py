"""Tests for capability probing and the per-class capability cache."""

import pytest

from magicpages.core.capabilities import (
    MARKER,
    Capability,
    CapabilityRegistry,
    CapabilitySet,
    is_magic,
)
from magicpages.site.page import MagicPage, Page


class PlainPage(Page):
    def on_saved(self):
        pass


class EmptyMagicPage(MagicPage):
    pass


class EventPage(MagicPage):
    def init(self):
        pass

    def on_saved(self):
        pass

    def on_create(self):
        pass

    def on_changed(self, field, old, new):
        pass

    def set_page_name(self):
        return "x"


class ChildEventPage(EventPage):
    on_create = None

    def on_trashed(self):
        pass


@pytest.fixture
def registry():
    return CapabilityRegistry()


# =============================================================================
# CapabilitySet
# =============================================================================


class TestCapabilitySet:
    def test_probe_detects_exact_methods(self):
        caps = CapabilitySet.probe(EventPage)
        assert caps.present() == [
            Capability.INIT,
            Capability.ON_SAVED,
            Capability.ON_CREATE,
            Capability.ON_CHANGED,
            Capability.SET_PAGE_NAME,
        ]

    def test_probe_empty_class(self):
        caps = CapabilitySet.probe(EmptyMagicPage)
        assert caps.present() == []
        assert not any(caps.as_dict().values())

    def test_base_page_implements_nothing(self):
        assert CapabilitySet.probe(Page).present() == []

    def test_inherited_methods_count(self):
        caps = CapabilitySet.probe(ChildEventPage)
        assert caps.on_saved
        assert caps.on_trashed

    def test_attribute_set_to_none_switches_capability_off(self):
        caps = CapabilitySet.probe(ChildEventPage)
        assert not caps.on_create

    def test_contains(self):
        caps = CapabilitySet.probe(EventPage)
        assert Capability.ON_SAVED in caps
        assert Capability.READY not in caps
        assert "on_saved" not in caps

    def test_as_dict_has_every_capability(self):
        caps = CapabilitySet.probe(EventPage)
        assert set(caps.as_dict()) == {c.value for c in Capability}


# =============================================================================
# Marker
# =============================================================================


class TestMarker:
    def test_magic_page_is_magic(self):
        assert is_magic(EventPage())

    def test_plain_page_is_not_magic(self):
        assert not is_magic(PlainPage())

    def test_falsy_marker_is_not_magic(self):
        class Switched(MagicPage):
            is_magic_page = False

        assert not is_magic(Switched())

    def test_marker_name(self):
        assert MARKER == "is_magic_page"


# =============================================================================
# CapabilityRegistry
# =============================================================================


class TestCapabilityRegistry:
    def test_probes_once_per_class(self, registry):
        first = registry.capabilities(EventPage)
        second = registry.for_page(EventPage())
        assert first is second
        assert registry.probe_count == 1

    def test_probes_each_class(self, registry):
        registry.capabilities(EventPage)
        registry.capabilities(ChildEventPage)
        assert registry.probe_count == 2
        assert registry.known_classes() == [EventPage, ChildEventPage]

    def test_is_known(self, registry):
        assert not registry.is_known(EventPage)
        registry.capabilities(EventPage)
        assert registry.is_known(EventPage)

    def test_clear(self, registry):
        registry.capabilities(EventPage)
        registry.clear()
        assert not registry.is_known(EventPage)
        assert registry.probe_count == 0
