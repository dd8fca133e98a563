import random

import pytest
from starlette.testclient import TestClient

from behaviorbin.app import create_app
from behaviorbin.assets import DirectoryAssetStore
from behaviorbin.behaviors import Behaviors
from behaviorbin.config import Settings


class FixedRandom(random.Random):
    """A Random whose uniform draw always returns the same value."""

    def __init__(self, value: float):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


@pytest.fixture
def fixed_random():
    return FixedRandom


@pytest.fixture
def static_dir(tmp_path):
    root = tmp_path / "static"
    root.mkdir()
    (root / "index.html").write_text("<html><body>index</body></html>")
    (root / "robots.txt").write_text("User-agent: *\n")
    (root / "css").mkdir()
    (root / "css" / "site.css").write_text("body { color: red; }")
    (tmp_path / "secret.txt").write_text("outside the root")
    return root


@pytest.fixture
def assets(static_dir):
    return DirectoryAssetStore(static_dir)


@pytest.fixture
def make_client(static_dir, assets):
    """Build a client around an app using the given entropy source."""

    def _make(rng=None, access_log=False):
        settings = Settings(static_dir=static_dir, seed=1234, access_log=access_log)
        app = create_app(settings, rng=rng or random.Random(1234), assets=assets)
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def behaviors(assets):
    return Behaviors(assets, random.Random(1234))
