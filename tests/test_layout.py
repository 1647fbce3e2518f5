"""
Layout expectation derivation across the device-class boundaries.
"""
import pytest

from conformance.layout import SMALL_SCREEN_MARGIN_PX, derive_expectation
from conformance.models.device import DeviceClass, DeviceProfile
from conformance.models.role import Role


def _device(width: int, height: int = 800) -> DeviceProfile:
    return DeviceProfile(id=f"w{width}", width=width, height=height)


class TestDeviceClass:
    @pytest.mark.parametrize("width,expected", [
        (320, DeviceClass.MOBILE),
        (767, DeviceClass.MOBILE),
        (768, DeviceClass.TABLET),
        (1024, DeviceClass.TABLET),
        (1025, DeviceClass.DESKTOP),
        (1920, DeviceClass.DESKTOP),
    ])
    def test_width_buckets(self, width, expected):
        assert _device(width).device_class is expected

    def test_low_power_tier(self):
        assert _device(320).is_low_power
        assert _device(375).is_low_power
        assert not _device(390).is_low_power

    def test_rejects_non_positive_viewport(self):
        with pytest.raises(ValueError):
            DeviceProfile(id="broken", width=0, height=600)


class TestDeriveExpectation:
    def test_767_is_compact(self):
        expectation = derive_expectation(_device(767), Role.CUSTOMER)
        assert expectation.shows_compact_nav
        assert not expectation.shows_expanded_nav
        assert expectation.expected_column_count == 1

    def test_768_is_expanded(self):
        expectation = derive_expectation(_device(768), Role.CUSTOMER)
        assert not expectation.shows_compact_nav
        assert expectation.shows_expanded_nav
        assert expectation.expected_column_count == 2

    def test_desktop_expects_three_columns(self):
        assert derive_expectation(_device(1280), Role.ADMIN).expected_column_count == 3

    def test_margin_only_on_small_screens(self):
        assert derive_expectation(_device(375), Role.TRAINER).margin_policy_px == SMALL_SCREEN_MARGIN_PX
        assert derive_expectation(_device(639), Role.TRAINER).margin_policy_px == SMALL_SCREEN_MARGIN_PX
        assert derive_expectation(_device(640), Role.TRAINER).margin_policy_px == 0

    def test_touch_floor_is_constant(self):
        for width in (320, 768, 1920):
            assert derive_expectation(_device(width), Role.ADMIN).min_touch_target_px == 44

    def test_accepts_role_value(self):
        expectation = derive_expectation(_device(390), "customer")
        assert expectation.role is Role.CUSTOMER
        assert expectation.device_id == "w390"

    def test_is_pure(self):
        device = _device(414)
        assert derive_expectation(device, Role.ADMIN) == derive_expectation(device, Role.ADMIN)
