"""
Layout Expectation Deriver - maps a device/role pair to expected affordances
"""
from .models.device import DeviceClass, DeviceProfile, MOBILE_MAX_WIDTH
from .models.expectation import LayoutExpectation, MIN_TOUCH_TARGET_PX
from .models.role import Role

SMALL_SCREEN_MAX_WIDTH = 640  # exclusive
SMALL_SCREEN_MARGIN_PX = 12

_COLUMNS = {
    DeviceClass.MOBILE: 1,
    DeviceClass.TABLET: 2,
    DeviceClass.DESKTOP: 3,
}


def derive_expectation(device: DeviceProfile, role: Role) -> LayoutExpectation:
    """
    Derive the expected layout for a device and role.

    Pure and total: never raises, never caches.

    Args:
        device: Device profile under test
        role: Role the scenario is logged in as

    Returns:
        LayoutExpectation for the pair
    """
    compact = device.width < MOBILE_MAX_WIDTH
    margin = SMALL_SCREEN_MARGIN_PX if device.width < SMALL_SCREEN_MAX_WIDTH else 0

    return LayoutExpectation(
        device_id=device.id,
        role=Role(role),
        shows_compact_nav=compact,
        shows_expanded_nav=not compact,
        expected_column_count=_COLUMNS[device.device_class],
        min_touch_target_px=MIN_TOUCH_TARGET_PX,
        margin_policy_px=margin,
    )
