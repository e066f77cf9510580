import os
import tempfile

# Ambiente isolado antes de importar main (que monta o app no import)
os.environ["RADAR_DATA_DIR"] = tempfile.mkdtemp(prefix="radar-test-")
os.environ["LOG_FILE"] = ""
for var in ("SMTP_HOST", "SMTP_PORT", "SMTP_SECURE", "SMTP_USER", "SMTP_PASS", "MAIL_FROM",
            "EMPRESA_ID_PADRAO", "RADAR_FRONT_BASE", "PORT"):
    os.environ[var] = ""

import pytest
from fastapi.testclient import TestClient

from config import Settings
from lifecycle import PlanLifecycleManager
from main import create_app
from notifications import NotificationDispatcher
from plan_index import PlanIndex
from storage import RecordStore


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=str(tmp_path / "data"), log_file=None)


@pytest.fixture
def smtp_settings(tmp_path):
    return Settings(
        data_dir=str(tmp_path / "data"),
        log_file=None,
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_user="radar",
        smtp_pass="segredo",
        mail_from="SafetyTech Radar <no-reply@example.com>",
    )


@pytest.fixture
def store(settings):
    return RecordStore(settings.data_dir)


@pytest.fixture
def index(settings):
    return PlanIndex(settings.data_dir)


@pytest.fixture
def manager(settings, store, index):
    return PlanLifecycleManager(settings, store, index, NotificationDispatcher(settings))


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)
