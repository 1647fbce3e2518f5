"""
Device Matrix and Role registries.

Both registries are read-only once built: they are constructed from a list of
profiles, reject duplicates up front, and fail lookups with a configuration
error so a bad matrix never reaches the browser.
"""
from typing import Dict, Iterable, Iterator, List, Optional, Union

from .errors import ConfigurationError, UnknownDevice, UnknownRole
from .models.device import DeviceProfile
from .models.role import NavigationTarget, Role, RoleProfile


DEFAULT_DEVICES: List[DeviceProfile] = [
    DeviceProfile(id="iphone-se", name="iPhone SE", width=320, height=568, pixel_ratio=2, touch=True),
    DeviceProfile(id="iphone-12", name="iPhone 12", width=375, height=812, pixel_ratio=3, touch=True),
    DeviceProfile(id="iphone-pro", name="iPhone Pro", width=390, height=844, pixel_ratio=3, touch=True),
    DeviceProfile(id="iphone-plus", name="iPhone Plus", width=414, height=896, pixel_ratio=3, touch=True),
    DeviceProfile(id="ipad", name="iPad", width=768, height=1024, pixel_ratio=2, touch=True),
    DeviceProfile(id="ipad-pro", name="iPad Pro", width=1024, height=1366, pixel_ratio=2, touch=True),
    DeviceProfile(id="desktop", name="Desktop", width=1280, height=720),
    DeviceProfile(id="large-desktop", name="Large Desktop", width=1920, height=1080),
]

_MAIN = ["main", "[role='main']"]

DEFAULT_ROLE_PROFILES: List[RoleProfile] = [
    RoleProfile(
        role=Role.ADMIN,
        landing_markers=["[data-testid='admin-dashboard']", "h1:has-text('Admin')"],
        targets=[
            NavigationTarget(path="/admin", name="Admin Dashboard", markers=_MAIN, critical=True),
            NavigationTarget(path="/admin/analytics", name="Admin Analytics", markers=_MAIN),
        ],
    ),
    RoleProfile(
        role=Role.TRAINER,
        landing_markers=["[data-testid='trainer-dashboard']", "h1:has-text('Trainer')"],
        targets=[
            NavigationTarget(path="/trainer", name="Trainer Dashboard", markers=_MAIN, critical=True),
            NavigationTarget(path="/trainer/customers", name="Customers", markers=_MAIN),
            NavigationTarget(path="/trainer/meal-plans", name="Saved Meal Plans", markers=_MAIN),
        ],
    ),
    RoleProfile(
        role=Role.CUSTOMER,
        landing_markers=["[data-testid='customer-dashboard']", "h1:has-text('My')"],
        targets=[
            NavigationTarget(path="/customer", name="Customer Dashboard", markers=_MAIN, critical=True),
            NavigationTarget(path="/customer/meal-plans", name="Meal Plans", markers=_MAIN),
            NavigationTarget(path="/customer/grocery-list", name="Grocery List", markers=_MAIN),
            NavigationTarget(path="/customer/progress", name="Progress", markers=_MAIN),
        ],
    ),
]


class DeviceRegistry:
    """Ordered, read-only collection of device profiles."""

    def __init__(self, profiles: Iterable[DeviceProfile] = None):
        profiles = DEFAULT_DEVICES if profiles is None else profiles
        self._profiles: Dict[str, DeviceProfile] = {}
        for profile in profiles:
            if profile.id in self._profiles:
                raise ConfigurationError(f"Duplicate device id: {profile.id!r}")
            self._profiles[profile.id] = profile

    def get(self, device_id: str) -> DeviceProfile:
        try:
            return self._profiles[device_id]
        except KeyError:
            raise UnknownDevice(device_id) from None

    def select(self, device_ids: Optional[Iterable[str]] = None) -> List[DeviceProfile]:
        """Resolve ids in the given order; None selects every device."""
        if device_ids is None:
            return list(self)
        return [self.get(device_id) for device_id in device_ids]

    def mobile(self) -> List[DeviceProfile]:
        return [p for p in self if p.is_mobile]

    def wide(self) -> List[DeviceProfile]:
        return [p for p in self if not p.is_mobile]

    def __iter__(self) -> Iterator[DeviceProfile]:
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, device_id: str) -> bool:
        return device_id in self._profiles


class RoleRegistry:
    """Read-only mapping of roles to their navigation profiles."""

    def __init__(self, profiles: Iterable[RoleProfile] = None):
        profiles = DEFAULT_ROLE_PROFILES if profiles is None else profiles
        self._profiles: Dict[Role, RoleProfile] = {}
        for profile in profiles:
            if profile.role in self._profiles:
                raise ConfigurationError(f"Duplicate role profile: {profile.role.value!r}")
            self._profiles[profile.role] = profile

    def get(self, role: Union[Role, str]) -> RoleProfile:
        try:
            return self._profiles[Role(role)]
        except (KeyError, ValueError):
            raise UnknownRole(str(getattr(role, "value", role))) from None

    def roles(self) -> List[Role]:
        return list(self._profiles)

    def __iter__(self) -> Iterator[RoleProfile]:
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)
