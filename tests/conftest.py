"""Shared fakes: a scripted SiteDriver and a browser session that hands it out."""

from decimal import Decimal
from pathlib import Path

import pytest

from vinted_publisher.core.config import Settings
from vinted_publisher.schemas.article import Article, Condition, Credentials
from vinted_publisher.services.browser_session import BrowserHandle
from vinted_publisher.services.errors import InitializationError
from vinted_publisher.services.vinted_driver import DriverTimeoutError, SiteDriver

ITEM_URL = "https://www.vinted.fr/items/12345-veste-en-jean"


class FakeDriver(SiteDriver):
    """Records every call in order. ``fail_on`` names steps that raise."""

    def __init__(
        self,
        signed_in=True,
        login_succeeds=True,
        final_url=ITEM_URL,
        fail_on=(),
        home_times_out=False,
        submit_times_out=False,
        cookies=None,
    ):
        self.signed_in = signed_in
        self.login_succeeds = login_succeeds
        self.final_url = final_url
        self.fail_on = set(fail_on)
        self.home_times_out = home_times_out
        self.submit_times_out = submit_times_out
        self._cookies = cookies if cookies is not None else [
            {"name": "_vinted_fr_session", "value": "abc", "domain": ".vinted.fr", "path": "/"},
            {"name": "access_token_web", "value": "tok", "domain": ".vinted.fr", "path": "/"},
        ]
        self.url = "about:blank"
        self.calls = []
        self.uploaded = []
        self.uploaded_existed = []
        self.fields = []

    def _step(self, name):
        self.calls.append(name)
        if name in self.fail_on:
            raise RuntimeError(f"{name} exploded")

    async def open_home(self):
        self._step("open_home")
        if self.home_times_out:
            raise DriverTimeoutError("home page never settled")
        self.url = "https://www.vinted.fr/"

    async def check_signed_in(self):
        self._step("check_signed_in")
        return self.signed_in

    async def login(self, email, password):
        self._step("login")
        if self.login_succeeds:
            self.signed_in = True

    async def open_new_item_page(self):
        self._step("open_new_item_page")
        self.url = "https://www.vinted.fr/items/new"

    async def set_field(self, field, value):
        self._step("set_field")
        if f"set_field:{field.value}" in self.fail_on:
            raise RuntimeError(f"{field.value} rejected")
        self.fields.append((field, value))

    async def upload_photo(self, path):
        self._step("upload_photo")
        self.uploaded.append(path)
        self.uploaded_existed.append(Path(path).exists())

    async def submit(self):
        self._step("submit")
        if not self.submit_times_out:
            self.url = self.final_url

    async def wait_for_url(self, pattern, timeout_ms):
        self._step("wait_for_url")
        if self.submit_times_out or not pattern.search(self.url):
            raise DriverTimeoutError(f"Timeout {timeout_ms}ms exceeded")

    async def current_url(self):
        return self.url

    async def cookies(self):
        return list(self._cookies)


class FakeBrowserSession:
    def __init__(self, driver, session_file, fail_init=False):
        self.driver = driver
        self.session_file = Path(session_file)
        self.fail_init = fail_init
        self.initialized = 0
        self.closed = 0

    async def initialize(self):
        if self.fail_init:
            raise InitializationError("Browser initialization failed: no display")
        self.initialized += 1
        return BrowserHandle(driver=self.driver, session_file=self.session_file)

    async def close(self):
        self.closed += 1


@pytest.fixture
def session_file(tmp_path):
    return tmp_path / "state" / "vinted-session.json"


@pytest.fixture
def settings(session_file):
    return Settings(
        _env_file=None,
        vinted_session_file=str(session_file),
        page_settle_seconds=0,
        photo_settle_seconds=0,
        field_settle_seconds=0,
        submit_timeout_ms=100,
    )


@pytest.fixture
def credentials():
    return Credentials(email="seller@example.com", password="correct horse")


@pytest.fixture
def make_article(tmp_path):
    def _make(photos=None, **overrides):
        if photos is None:
            photos = []
            for i in range(3):
                photo = tmp_path / f"local-{i}.jpg"
                photo.write_bytes(b"\xff\xd8fake-jpeg")
                photos.append(str(photo))
        data = dict(
            id="art-1",
            title="Veste en jean",
            description="Peu portée",
            brand="Levi's",
            size="M",
            condition=Condition.VERY_GOOD,
            color="Bleu",
            material="Coton",
            price=Decimal("25"),
            photos=photos,
        )
        data.update(overrides)
        return Article(**data)

    return _make
