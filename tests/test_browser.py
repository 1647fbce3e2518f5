"""
Form login and evidence capture against the in-memory driver.
"""
import json

import pytest

from conformance import selectors
from conformance.browser.artifact_capture import ArtifactCapture
from conformance.browser.auth import FormLoginAuthenticator
from conformance.browser.controller import GRID_COLUMNS_JS, BrowserController
from conformance.errors import AuthError, ElementNotFound
from conformance.models.role import Credentials, Role

from tests.fakes import FakeDriver, FakeElement, make_scenario

CREDENTIALS = Credentials(email="customer@example.com", password="TestPass123!")


def _login_page(device, error_text=None):
    elements = {
        selectors.EMAIL_INPUT[0]: [FakeElement(width=300, height=44)],
        selectors.PASSWORD_INPUT[1]: [FakeElement(width=300, height=44)],
        selectors.SUBMIT_BUTTON[0]: [FakeElement(width=300, height=48, text="Sign In")],
    }
    if error_text:
        elements[selectors.LOGIN_ERROR[0]] = [FakeElement(width=300, height=40, text=error_text)]
    return FakeDriver(device, elements=elements)


@pytest.mark.asyncio
class TestFormLoginAuthenticator:
    async def test_submits_form(self):
        device = make_scenario("iphone-se").device
        driver = _login_page(device)

        session = await FormLoginAuthenticator(login_path="/login").login(driver, Role.CUSTOMER, CREDENTIALS)

        assert session.role is Role.CUSTOMER
        assert driver.visited == ["/login"]
        assert [text for _, text in driver.filled] == ["customer@example.com", "TestPass123!"]
        assert len(driver.clicked) == 1

    async def test_error_banner_rejects(self):
        device = make_scenario("desktop").device
        driver = _login_page(device, error_text="Invalid credentials")

        with pytest.raises(AuthError) as excinfo:
            await FormLoginAuthenticator().login(driver, Role.TRAINER, CREDENTIALS)
        assert excinfo.value.reason == "login rejected: Invalid credentials"
        assert excinfo.value.role == "trainer"

    async def test_missing_form(self):
        device = make_scenario("desktop").device
        driver = FakeDriver(device, elements={})

        with pytest.raises(AuthError) as excinfo:
            await FormLoginAuthenticator().login(driver, Role.ADMIN, CREDENTIALS)
        assert excinfo.value.reason.startswith("login form not found")


@pytest.mark.asyncio
class TestDriverObservation:
    async def test_observe_prefers_visible_match(self):
        device = make_scenario("desktop").device
        driver = FakeDriver(device, elements={
            ".hidden": [FakeElement(visible=False)],
            ".shown": [FakeElement(width=200, height=50, text="Hello")],
        })
        observation = await driver.observe([".missing", ".hidden", ".shown"])
        assert observation.selector == ".shown"
        assert observation.geometry.width == 200
        assert observation.viewport_width == 1280

    async def test_observe_falls_back_to_hidden(self):
        device = make_scenario("desktop").device
        driver = FakeDriver(device, elements={".hidden": [FakeElement(visible=False)]})
        observation = await driver.observe([".hidden"])
        assert not observation.visible
        assert observation.geometry is None

    async def test_locate_first_matching(self):
        device = make_scenario("desktop").device
        driver = FakeDriver(device, elements={".b": [FakeElement(text="b")]})
        assert (await driver.locate_first_matching([".a", ".b"])).text == "b"
        with pytest.raises(ElementNotFound) as excinfo:
            await driver.locate_first_matching([".x", ".y"])
        assert excinfo.value.selectors == [".x", ".y"]

    async def test_observe_all_visible_only(self):
        device = make_scenario("desktop").device
        buttons = [FakeElement(visible=False) for _ in range(60)] + [FakeElement(width=20, height=20, text="Delete")]
        driver = FakeDriver(device, elements={"button": buttons})

        assert len(await driver.observe_all("button")) == 61
        visible = await driver.observe_all("button", visible_only=True)
        assert [o.text for o in visible] == ["Delete"]
        assert await driver.observe_all("a") == []

    async def test_match_first_returns_the_visible_handle(self):
        device = make_scenario("desktop").device
        hidden, shown = FakeElement(visible=False), FakeElement(text="grid")
        driver = FakeDriver(device, elements={".grid": [hidden, shown]})

        match = await driver.match_first([".missing", ".grid"])
        assert match.selector == ".grid"
        assert match.handle is shown
        assert match.observation.visible
        assert await driver.match_first([".missing"]) is None

    async def test_locate_first_matching_prefers_visible(self):
        device = make_scenario("desktop").device
        driver = FakeDriver(device, elements={
            ".a": [FakeElement(visible=False, text="hidden a")],
            ".b": [FakeElement(text="b")],
        })
        assert (await driver.locate_first_matching([".a", ".b"])).text == "b"


@pytest.mark.asyncio
class TestArtifactCapture:
    async def test_capture_failure(self, tmp_path):
        device = make_scenario("iphone-se").device
        capture = ArtifactCapture("run-1", root=tmp_path)

        captured = await capture.capture_failure(FakeDriver(device), "iphone-se/customer/customer")

        assert len(captured) == 2
        assert all("/" not in name for name in captured)
        summary = capture.get_artifacts_summary()
        assert summary["total_artifacts"] == 2
        assert summary["types"] == {"png": 1, "html": 1}

        index = json.loads((tmp_path / "run-1" / "index.json").read_text(encoding="utf-8"))
        assert index[0]["scenario"] == "iphone-se/customer/customer"
        assert index[0]["artifacts"] == captured


class PlaywrightHandle:
    """Stands in for a Playwright ElementHandle."""

    def __init__(self, visible=True, columns=None, text=""):
        self.visible = visible
        self.columns = columns
        self.text = text
        self.scripts = []

    async def is_visible(self):
        return self.visible

    async def bounding_box(self):
        return {"x": 0, "y": 0, "width": 300, "height": 200} if self.visible else None

    async def text_content(self):
        return self.text

    async def evaluate(self, script):
        self.scripts.append(script)
        return self.columns


class PlaywrightPage:
    def __init__(self, handles, url="http://localhost:4000/customer"):
        self.handles = handles
        self.url = url
        self.viewport_size = {"width": 320, "height": 568}

    def is_closed(self):
        return False

    async def query_selector(self, selector):
        found = self.handles.get(selector, [])
        return found[0] if found else None

    async def query_selector_all(self, selector):
        return list(self.handles.get(selector, []))


def _controller(page):
    controller = BrowserController(browser=None)
    controller.device = make_scenario("iphone-se").device
    controller.page = page
    return controller


@pytest.mark.asyncio
class TestBrowserController:
    async def test_grid_columns_read_from_visible_grid(self):
        desktop_grid = PlaywrightHandle(visible=False, columns=None)
        mobile_grid = PlaywrightHandle(visible=True, columns=3)
        controller = _controller(PlaywrightPage({".grid": [desktop_grid, mobile_grid]}))

        assert await controller.grid_column_count([".meal-plan-grid", ".grid"]) == 3
        assert mobile_grid.scripts == [GRID_COLUMNS_JS]
        assert desktop_grid.scripts == []

    async def test_no_visible_grid(self):
        controller = _controller(PlaywrightPage({".grid": [PlaywrightHandle(visible=False, columns=2)]}))
        assert await controller.grid_column_count([".grid"]) is None

    async def test_current_url(self):
        controller = _controller(PlaywrightPage({}, url="http://localhost:4000/login"))
        assert controller.current_url() == "http://localhost:4000/login"
        assert controller.viewport() == (320, 568)
