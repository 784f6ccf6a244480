import asyncio
import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="nainzaka-tests-")

# Must be set before nainzaka.settings is imported
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/test.db"
os.environ["ADMIN_EMAIL"] = "admin@nainzaka.com"
os.environ["ADMIN_PASSWORD"] = "glow-up-2024"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["GROQ_API_KEY"] = ""
os.environ["IMGBB_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient

from nainzaka.auth import reset_login_attempts
from nainzaka.db import Base, engine
from nainzaka.llm import EmptyCompletionError, get_llm_client
from nainzaka.schemas import ProductOut
from nainzaka.server import app
from nainzaka.uploads import ImageHost, ImageUploadError, get_image_host

ADMIN_EMAIL = os.environ["ADMIN_EMAIL"]
ADMIN_PASSWORD = os.environ["ADMIN_PASSWORD"]

PNG = ("serum.png", b"\x89PNG\r\n\x1a\n" + b"0" * 64, "image/png")


class FakeLLM:
    def __init__(self):
        self.prompts = []
        self.models = []
        self.reply = "Our Glow Serum brightens dull skin."
        self.error = None

    async def complete(self, prompt, model=None):
        self.prompts.append(prompt)
        self.models.append(model)
        if self.error is not None:
            raise self.error
        if not self.reply:
            raise EmptyCompletionError("LLM returned empty content")
        return self.reply


class FakeImageHost(ImageHost):
    name = "fake"

    def __init__(self):
        self.uploaded = []
        self.fail_on = None

    async def upload(self, image):
        if self.fail_on is not None and len(self.uploaded) == self.fail_on:
            raise ImageUploadError("Image upload failed: host rejected the file")
        self.uploaded.append(image.filename)
        return f"https://i.ibb.co/test/{len(self.uploaded)}-{image.filename}"


async def _drop_all():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def image_host():
    return FakeImageHost()


@pytest.fixture
def client(fake_llm, image_host):
    app.dependency_overrides[get_llm_client] = lambda: fake_llm
    app.dependency_overrides[get_image_host] = lambda: image_host
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    reset_login_attempts()
    asyncio.run(_drop_all())


@pytest.fixture
def admin_token(client):
    res = client.post(
        "/api/admin/login",
        data={"username": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert res.status_code == 200, res.text
    return res.json()["access_token"]


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def add_product(client, admin_headers):
    """Create a product through the admin form and return its JSON."""

    def _add(name="Glow Serum", price="1500", category="serums", images=None, **fields):
        data = {"name": name, "price": price, "category": category}
        for key, value in fields.items():
            data[key] = str(value).lower() if isinstance(value, bool) else str(value)
        files = [("images", f) for f in (images or [PNG])]
        res = client.post("/api/admin/products", data=data, files=files, headers=admin_headers)
        assert res.status_code == 201, res.text
        return res.json()

    return _add


def make_product(**fields) -> ProductOut:
    """In-memory product for the pure catalog/analytics helpers."""
    defaults = {"id": fields.get("name", "p").lower().replace(" ", "-"), "name": "Product", "price": 1000}
    defaults.update(fields)
    return ProductOut(**defaults)
