"""HTTP adapter tests — every UI trigger through FastAPI with a fake generator."""

import os
import sys
from datetime import date

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from trend_analyzer.database import Base
from trend_analyzer.main import app, build_session
from trend_analyzer.schemas.analysis_schema import (
    DetailedProductSuggestion,
    DetailedSectorAnalysis,
    ProductAnalysis,
)
from trend_analyzer.schemas.trend_schema import ProductTrend, Sector, TrendReport
from trend_analyzer.services.gemini_client import GenerationFailed
from trend_analyzer.services.i18n import Translator
from trend_analyzer.services.profile_store import ProfileStore
from trend_analyzer.services.report_session import AppContext, ReportSession
from trend_analyzer.services.session_dependency import get_profile_store, get_report_session

TODAY = date(2026, 10, 19)
PASSWORD = "trend-spotter"

client = TestClient(app)


class _FakeGenerator:
    def __init__(self):
        self.sector_calls = []
        self.product_calls = []
        self.fail_report = False
        self.fail_sector = False

    async def report(self, options, today):
        if self.fail_report:
            raise GenerationFailed("report", "transport error")
        return TrendReport(
            sectors=[
                Sector(
                    name="Technology",
                    products=[
                        ProductTrend(name="Smart Ring", demand_rate=18.0, regions="EU", reasons="Health",
                                     profitability_score=8, suppliers=["Oura"]),
                        ProductTrend(name="Solar Charger", demand_rate=25.0, regions="Africa", reasons="Off-grid",
                                     profitability_score=9, suppliers=["Anker"]),
                        ProductTrend(name="Earbuds", demand_rate=12.0, regions="Asia", reasons="Commute",
                                     profitability_score=5, suppliers=["Anker", "Sony"]),
                    ],
                )
            ],
            global_analysis="Summary",
        )

    async def sector(self, sector_name, options, today):
        self.sector_calls.append(sector_name)
        if self.fail_sector:
            raise GenerationFailed("sector", "HTTP 500")
        return DetailedSectorAnalysis(
            sector_name=sector_name,
            in_depth_analysis="Deep dive",
            product_suggestions=[
                DetailedProductSuggestion(
                    name="Smart Ring",
                    description="Tracker",
                    target_audience="Adults",
                    selling_points=["Discreet"],
                    price_range="$250",
                    suppliers=["OEM"],
                    profitability_score=7,
                    market_entry_difficulty="High",
                )
            ],
        )

    async def product(self, product_name, sector_name, options, today):
        self.product_calls.append((product_name, sector_name))
        return ProductAnalysis(
            product_name=product_name,
            market_analysis=f"Growing in {sector_name}",
            target_audience="Athletes",
            price_range="$250",
            risks=["Competition"],
        )


@pytest.fixture(autouse=True)
def fake_app():
    """Fresh in-memory store and session per test, injected through overrides."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    store = ProfileStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))
    generator = _FakeGenerator()
    session = ReportSession(
        AppContext(translator=Translator()),
        report_fn=generator.report,
        sector_fn=generator.sector,
        product_fn=generator.product,
        today_fn=lambda: TODAY,
    )

    app.dependency_overrides[get_report_session] = lambda: session
    app.dependency_overrides[get_profile_store] = lambda: store
    yield {"store": store, "session": session, "generator": generator}
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


def _signup(email="sam@example.com"):
    return client.post("/auth/signup", json={"name": "Sam Lee", "email": email, "password": PASSWORD})


# ===================================================================== #
#  General                                                                #
# ===================================================================== #

class TestGeneral:
    def test_health(self):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    def test_initial_state(self):
        data = client.get("/state").json()
        assert data["user"] is None
        assert data["language"] == "en"
        assert data["periodMonths"] == 1
        assert data["report"]["status"] == "idle"
        assert data["pendingAction"] is None

    def test_build_session_restores_store(self, fake_app):
        store = fake_app["store"]
        store.save_language("fr")
        session = build_session(store)
        assert session.context.language == "fr"
        assert session.context.user is None


# ===================================================================== #
#  Preferences / report                                                   #
# ===================================================================== #

class TestReport:
    def test_preferences_update_and_persist_language(self, fake_app):
        resp = client.put("/preferences", json={"language": "fr", "periodMonths": 3, "keywords": "solar"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["language"] == "fr"
        assert data["periodMonths"] == 3
        assert fake_app["store"].load_language() == "fr"
        assert fake_app["session"].context.keywords == "solar"

    def test_invalid_period_rejected(self):
        resp = client.put("/preferences", json={"periodMonths": 2})
        assert resp.status_code == 422

    def test_generate_report(self):
        data = client.post("/report/generate").json()
        assert data["report"]["status"] == "success"
        assert data["report"]["data"]["sectors"][0]["sectorName"] == "Technology"
        assert data["report"]["data"]["globalAnalysis"] == "Summary"

    def test_generate_report_failure_is_state_not_http_error(self, fake_app):
        fake_app["generator"].fail_report = True
        resp = client.post("/report/generate")
        assert resp.status_code == 200
        report = resp.json()["report"]
        assert report["status"] == "error"
        assert report["data"] is None
        assert report["error"]

    def test_export_requires_report(self):
        assert client.get("/report/export").status_code == 404

    def test_export_report_csv(self):
        client.post("/report/generate")
        resp = client.get("/report/export")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert "trend_report_1_months.csv" in resp.headers["content-disposition"]
        assert resp.content.startswith("\ufeff".encode("utf-8"))

    def test_sector_products_filter_and_sort(self):
        client.post("/report/generate")
        resp = client.get(
            "/report/sectors/Technology/products",
            params={"q": "anker", "sort": "demandRate", "direction": "desc"},
        )
        assert resp.status_code == 200
        assert [p["name"] for p in resp.json()] == ["Solar Charger", "Earbuds"]
        assert "demandRate" in resp.json()[0]

    def test_sector_products_no_match(self):
        client.post("/report/generate")
        resp = client.get("/report/sectors/Technology/products", params={"q": "nothing-here"})
        assert resp.status_code == 200
        assert resp.json() == []

    def test_unknown_sector(self):
        client.post("/report/generate")
        assert client.get("/report/sectors/Unknown/products").status_code == 404


# ===================================================================== #
#  Gating, auth and replay                                                #
# ===================================================================== #

class TestAnalysisFlow:
    def test_anonymous_sector_request_opens_auth_prompt(self, fake_app):
        data = client.post("/analysis/sector", json={"sectorName": "Technology"}).json()
        assert data["authPromptOpen"] is True
        assert data["pendingAction"] is None
        assert fake_app["generator"].sector_calls == []

        data = client.delete("/auth/prompt").json()
        assert data["authPromptOpen"] is False

    def test_free_user_upgrade_replays_once(self, fake_app):
        assert _signup().status_code == 201

        data = client.post("/analysis/sector", json={"sectorName": "Technology"}).json()
        assert data["upgradePromptOpen"] is True
        assert data["pendingAction"] == {"kind": "analyze_sector", "payload": "Technology"}

        data = client.post("/auth/upgrade").json()
        assert data["user"]["subscription"] == "premium"
        assert data["pendingAction"] is None
        assert data["upgradePromptOpen"] is False
        assert data["sectorAnalysis"]["status"] == "success"
        assert data["sectorAnalysis"]["data"]["sectorName"] == "Technology"

        client.put("/auth/settings", json={"notificationsEnabled": True})
        assert fake_app["generator"].sector_calls == ["Technology"]

    def test_dismiss_upgrade_prompt_keeps_pending(self):
        _signup()
        client.post("/analysis/sector", json={"sectorName": "Food"})
        data = client.delete("/auth/upgrade-prompt").json()
        assert data["upgradePromptOpen"] is False
        assert data["pendingAction"]["payload"] == "Food"

    def test_logout_clears_pending_action(self, fake_app):
        _signup()
        client.post("/analysis/sector", json={"sectorName": "Food"})
        data = client.post("/auth/logout").json()
        assert data["user"] is None
        assert data["pendingAction"] is None
        assert fake_app["store"].load_session_user() is None

    def test_product_drill_down_and_exports(self):
        _signup()
        client.post("/auth/upgrade")
        client.post("/analysis/sector", json={"sectorName": "Technology"})

        sector_csv = client.get("/analysis/sector/export")
        assert sector_csv.status_code == 200
        assert "sector_analysis_Technology.csv" in sector_csv.headers["content-disposition"]

        data = client.post("/analysis/product", json={"productName": "Smart Ring"}).json()
        assert data["sectorAnalysis"]["isOpen"] is False
        assert data["productAnalysis"]["status"] == "success"
        assert data["productAnalysis"]["data"]["marketAnalysis"] == "Growing in Technology"

        product_csv = client.get("/analysis/product/export")
        assert product_csv.status_code == 200

        data = client.delete("/analysis/product").json()
        assert data["productAnalysis"]["status"] == "idle"
        assert client.get("/analysis/product/export").status_code == 404

    def test_product_without_open_sector_is_conflict(self, fake_app):
        resp = client.post("/analysis/product", json={"productName": "Anything"})
        assert resp.status_code == 409
        assert fake_app["generator"].product_calls == []

    def test_product_outside_suggestions_is_conflict(self, fake_app):
        _signup()
        client.post("/auth/upgrade")
        client.post("/analysis/sector", json={"sectorName": "Technology"})

        resp = client.post("/analysis/product", json={"productName": "Earbuds"})
        assert resp.status_code == 409
        assert fake_app["generator"].product_calls == []
        assert client.get("/state").json()["sectorAnalysis"]["isOpen"] is True

    def test_sector_failure_goes_to_notice_and_can_be_dismissed(self, fake_app):
        fake_app["generator"].fail_sector = True
        _signup()
        client.post("/auth/upgrade")
        client.post("/report/generate")

        data = client.post("/analysis/sector", json={"sectorName": "Technology"}).json()
        assert data["sectorAnalysis"]["isOpen"] is False
        assert data["notice"]
        assert data["report"]["status"] == "success"
        assert data["report"]["error"] is None

        data = client.delete("/notice").json()
        assert data["notice"] is None

    def test_login_as_other_premium_account_drops_pending_action(self, fake_app):
        _signup(email="pat@example.com")
        client.post("/auth/upgrade")
        _signup()

        data = client.post("/analysis/sector", json={"sectorName": "Technology"}).json()
        assert data["pendingAction"]["payload"] == "Technology"

        resp = client.post("/auth/login", json={"email": "pat@example.com", "password": PASSWORD})
        assert resp.status_code == 200
        data = resp.json()
        assert data["user"]["subscription"] == "premium"
        assert data["pendingAction"] is None
        assert data["sectorAnalysis"]["status"] == "idle"
        assert fake_app["generator"].sector_calls == []

    def test_close_sector_modal(self):
        _signup()
        client.post("/auth/upgrade")
        client.post("/analysis/sector", json={"sectorName": "Technology"})
        data = client.delete("/analysis/sector").json()
        assert data["sectorAnalysis"]["isOpen"] is False
        assert data["sectorAnalysis"]["data"] is None


class TestAuthRoutes:
    def test_duplicate_signup_conflict(self):
        _signup()
        resp = _signup()
        assert resp.status_code == 409

    def test_login_errors(self):
        _signup()
        client.post("/auth/logout")
        resp = client.post("/auth/login", json={"email": "sam@example.com", "password": "wrong-pass"})
        assert resp.status_code == 401

    def test_login_success(self):
        _signup()
        client.post("/auth/logout")
        resp = client.post("/auth/login", json={"email": "sam@example.com", "password": PASSWORD})
        assert resp.status_code == 200
        assert resp.json()["user"]["name"] == "Sam Lee"

    def test_google_login(self):
        data = client.post("/auth/google").json()
        assert data["user"]["email"] == "alex.doe@example.com"
        assert data["user"]["subscription"] == "free"

    def test_upgrade_requires_login(self):
        assert client.post("/auth/upgrade").status_code == 401

    def test_settings_require_login(self):
        assert client.put("/auth/settings", json={"notificationsEnabled": True}).status_code == 401

    def test_weak_password_rejected(self):
        resp = client.post("/auth/signup", json={"name": "Sam", "email": "s@example.com", "password": "123"})
        assert resp.status_code == 422
