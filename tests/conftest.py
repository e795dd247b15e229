import io

import pytest

from app import create_app
from config import TestConfig
from models import db


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def app(upload_dir):
    app = create_app(TestConfig, UPLOAD_FOLDER=str(upload_dir))
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def image(name="logo.png", content=b"\x89PNG fake image"):
    return (io.BytesIO(content), name)


def uploaded(upload_dir, public_path):
    """Filesystem path for an '/uploads/<name>' value."""
    return upload_dir / public_path.rsplit("/", 1)[1]
