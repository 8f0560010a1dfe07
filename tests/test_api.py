"""Tests for the HTTP API, with the content store patched out."""

import json
from contextlib import ExitStack
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from tuning_catalog.api.deps import get_catalog_service, get_kv_store, get_mailer
from tuning_catalog.app.main import app
from tuning_catalog.core.config import Settings, get_settings
from tuning_catalog.models.catalog import ResellerOverride
from tuning_catalog.services.catalog import CatalogService
from tuning_catalog.services.contact import ContactMailer
from tuning_catalog.services.preferences import InMemoryKeyValueStore

ADMIN = {"X-Admin-Key": "test-admin-key"}
RESELLER = {"X-Reseller-Id": "test2", "X-Reseller-Key": "secret"}
D4_PAGE = "/api/brands/volvo/xc60/2018-2021/d4-190hk"

PATCHED = {
    "tuning_catalog.db.catalog": [
        "fetch_brands",
        "fetch_brand",
        "fetch_addons",
        "fetch_addon_overrides",
        "fetch_stage_descriptions",
        "fetch_reseller_stage_descriptions",
    ],
    "tuning_catalog.db.overrides": [
        "fetch_overrides",
        "fetch_engine_overrides",
        "fetch_global_descriptions",
        "find_scope_overrides",
        "insert_override",
    ],
    "tuning_catalog.db.resellers": ["fetch_reseller_config", "verify_reseller_key"],
}


@pytest.fixture
def db(volvo, addon_catalog, reseller_config):
    mocks = SimpleNamespace()
    with ExitStack() as stack:
        for module, names in PATCHED.items():
            for name in names:
                mock = stack.enter_context(patch(f"{module}.{name}", new_callable=AsyncMock))
                mock.return_value = []
                setattr(mocks, name, mock)
        mocks.fetch_brands.return_value = [volvo]
        mocks.fetch_brand.return_value = volvo
        mocks.fetch_addons.return_value = addon_catalog
        mocks.fetch_reseller_config.return_value = reseller_config
        mocks.verify_reseller_key.return_value = True
        mocks.insert_override.side_effect = lambda override: override
        yield mocks


@pytest.fixture
def mail():
    return SimpleNamespace(status=200, sent=[])


@pytest.fixture
def client(db, mail):
    def handler(request: httpx.Request) -> httpx.Response:
        mail.sent.append(json.loads(request.content))
        return httpx.Response(mail.status, json={"id": "msg-1"})

    service = CatalogService()
    store = InMemoryKeyValueStore()
    mailer = ContactMailer(
        get_settings(), httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )
    app.dependency_overrides[get_catalog_service] = lambda: service
    app.dependency_overrides[get_kv_store] = lambda: store
    app.dependency_overrides[get_mailer] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()


def brand_wide(price: float, override_id: str = "o-brand", **fields) -> ResellerOverride:
    return ResellerOverride(
        id=override_id,
        reseller_id="test2",
        brand="Volvo",
        stage_name="Steg 1",
        price=price,
        **fields,
    )


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


class TestCatalogRoutes:
    def test_brands(self, client):
        [brand] = client.get("/api/brands").json()["brands"]
        assert brand["name"] == "Volvo"
        assert brand["models"] == ["XC60", "XC90"]

    def test_year_lists_engines(self, client):
        data = client.get("/api/brands/volvo/xc60/2018-2021").json()
        assert [e["slug"] for e in data["engines"]] == ["d4-190hk"]

    def test_engine_page(self, client):
        response = client.get(D4_PAGE)
        assert response.status_code == 200
        page = response.json()
        assert page["engine_id"] == "engine-d4"
        steg1, steg2 = page["stages"]
        assert steg1["price"] == steg1["display_price"] == 4995
        assert page["currency"] == "SEK"
        assert steg1["expanded"] and not steg2["expanded"]
        assert steg1["contact_link"] == (
            "https://www.example.se/volvo/xc60/2018-2021/d4-190hk#steg-1"
        )
        assert [a["id"] for a in steg1["addons"]] == ["launch", "dpf"]
        assert [a["id"] for a in steg2["addons"]] == ["egr", "launch", "dpf"]
        assert len(steg1["dyno"]["rpm"]) == 8
        assert max(steg1["dyno"]["tuned_hk"]) == 235

    def test_requested_stage_is_expanded(self, client):
        steg1, steg2 = client.get(D4_PAGE, params={"stage": "steg-2"}).json()["stages"]
        assert steg2["expanded"] and not steg1["expanded"]

    @pytest.mark.parametrize(
        "lang,message",
        [
            ("sv", "Information saknas för det valda fordonet"),
            ("en", "Information is missing for the selected vehicle"),
        ],
    )
    def test_unknown_engine(self, client, lang, message):
        response = client.get(
            "/api/brands/volvo/xc60/2018-2021/unknown", params={"lang": lang}
        )
        assert response.status_code == 404
        assert response.json()["detail"] == message

    def test_store_failure_is_not_found(self, client, db):
        db.fetch_brand.side_effect = RuntimeError("connection reset")
        response = client.get(D4_PAGE)
        assert response.status_code == 404
        assert "connection reset" not in response.text

    @pytest.mark.parametrize(
        "failing,path",
        [
            ("fetch_brands", "/api/brands"),
            ("fetch_brands", "/api/reseller/test2/brands"),
            ("fetch_addons", "/api/aktplus-options"),
            ("fetch_addon_overrides", "/api/aktplus-options?reseller_id=test2"),
            ("fetch_stage_descriptions", "/api/stage-descriptions"),
            ("fetch_global_descriptions", "/api/stage-descriptions?reseller_id=test2"),
            ("fetch_addons", f"{D4_PAGE}/aktplus-options"),
            ("fetch_addon_overrides", f"{D4_PAGE}/aktplus-options?reseller_id=test2"),
        ],
    )
    def test_store_failure_on_lists_is_not_found(self, client, db, failing, path):
        getattr(db, failing).side_effect = RuntimeError("connection reset")
        response = client.get(path)
        assert response.status_code == 404
        assert response.json()["detail"] == "Information saknas för det valda fordonet"

    def test_descriptions_fill_missing_stage_text(self, client, db):
        db.fetch_stage_descriptions.return_value = [
            SimpleNamespace(stage_name="Steg 2", description="Mer kraft.")
        ]
        steg1, steg2 = client.get(D4_PAGE).json()["stages"]
        assert steg1["description_text"] == ""
        assert steg2["description_text"] == "Mer kraft."

    def test_dyno(self, client):
        data = client.get("/api/dyno", params={"peak": 200, "fuel": "Diesel"}).json()
        assert len(data["rpm"]) == 8
        assert max(data["values"]) == 200

    def test_dyno_rejects_negative_peak(self, client):
        assert client.get("/api/dyno", params={"peak": -1}).status_code == 422

    def test_engine_aktplus_options(self, client):
        options = client.get(f"{D4_PAGE}/aktplus-options").json()
        assert {o["id"] for o in options} == {"egr", "launch", "dpf"}

    def test_aktplus_options(self, client):
        options = client.get("/api/aktplus-options", params={"lang": "en"}).json()
        assert [o["title"] for o in options][:2] == ["Pops & Bangs", "EGR delete"]


# ---------------------------------------------------------------------------
# Reseller storefront
# ---------------------------------------------------------------------------


class TestResellerStorefront:
    RESELLER_PAGE = "/api/reseller/test2/volvo/xc60/2018-2021/d4-190hk"

    def test_brand_wide_price(self, client, db):
        db.fetch_overrides.return_value = [brand_wide(4500)]
        page = client.get(self.RESELLER_PAGE).json()
        steg1, steg2 = page["stages"]
        assert steg1["price"] == 4500
        assert steg1["tuned_hk"] == 235
        assert steg2["price"] == 8995
        assert page["currency"] == "EUR"
        assert (steg1["display_price"], steg2["display_price"]) == (450, 900)
        assert steg1["contact_link"].startswith("https://www.example.se/reseller/test2/volvo/")
        assert page["logo_url"] == "https://cdn.example.se/volvo.png"

    def test_ambiguous_overrides(self, client, db):
        db.fetch_overrides.return_value = [brand_wide(4500, "a"), brand_wide(4000, "b")]
        assert client.get(self.RESELLER_PAGE).status_code == 409

    def test_hidden_aktplus(self, client, db):
        db.fetch_overrides.return_value = [brand_wide(4500, show_aktplus=False)]
        page = client.get(self.RESELLER_PAGE).json()
        assert page["show_aktplus"] is False
        assert all(stage["addons"] == [] for stage in page["stages"])

    def test_hidden_make(self, client, db, reseller_config):
        db.fetch_reseller_config.return_value = reseller_config.model_copy(
            update={"hidden_makes": ["volvo"]}
        )
        assert client.get(self.RESELLER_PAGE).status_code == 404
        assert client.get("/api/reseller/test2/brands").json() == {"brands": []}

    def test_unknown_reseller(self, client, db):
        db.fetch_reseller_config.return_value = None
        assert client.get("/api/reseller/nobody/config").status_code == 404

    def test_embed_config(self, client):
        config = client.get("/api/reseller/test2/embed-config").json()
        assert config["currency"] == "EUR"
        assert config["exchange_rate"] == 0.1
        assert config["allowed_messages"] == ["height", "scrollToIframe"]


# ---------------------------------------------------------------------------
# Reseller administration
# ---------------------------------------------------------------------------


class TestResellerAuth:
    def test_missing_headers(self, client):
        assert client.get("/api/overrides").status_code == 401

    def test_invalid_key(self, client, db):
        db.verify_reseller_key.return_value = False
        assert client.get("/api/overrides", headers=RESELLER).status_code == 401

    def test_key_check_failure(self, client, db):
        db.verify_reseller_key.side_effect = RuntimeError("store down")
        assert client.get("/api/overrides", headers=RESELLER).status_code == 401

    def test_valid_key(self, client, db):
        db.fetch_overrides.return_value = [brand_wide(4500)]
        response = client.get("/api/overrides", headers=RESELLER, params={"brand": "Volvo"})
        assert response.status_code == 200
        assert response.json()[0]["price"] == 4500
        db.fetch_overrides.assert_awaited_once_with("test2", "Volvo")


class TestOverrideCreate:
    def test_created(self, client):
        response = client.post(
            "/api/overrides",
            headers=RESELLER,
            json={"brand": "Volvo", "stage_name": "Steg 1", "price": 4500},
        )
        assert response.status_code == 201
        assert response.json()["id"] == "override-test2-volvo----steg-1"

    def test_conflict(self, client, db):
        db.find_scope_overrides.return_value = [brand_wide(4000)]
        response = client.post(
            "/api/overrides",
            headers=RESELLER,
            json={"brand": "Volvo", "stage_name": "Steg 1", "price": 4500},
        )
        assert response.status_code == 409
        db.insert_override.assert_not_awaited()

    def test_engine_ref_gets_canonical_label_and_id(self, client, db):
        response = client.post(
            "/api/overrides",
            headers=RESELLER,
            json={
                "brand": "Volvo",
                "model": "XC60",
                "year": "2018-2021",
                "engine_ref": "engine-d4",
                "stage_name": "Steg 1",
                "price": 3000,
            },
        )
        assert response.status_code == 201
        created = response.json()
        assert created["id"] == "override-test2-volvo-xc60-2018-2021-d4-190hk-steg-1"
        assert created["engine"] == "D4 190hk"
        assert created["engine_ref"] == "engine-d4"

    def test_same_engine_by_label_and_by_id_conflicts(self, client, db):
        by_label = ResellerOverride(
            id="override-test2-volvo-xc60-2018-2021-d4-190hk-steg-1",
            reseller_id="test2",
            brand="Volvo",
            model="XC60",
            year="2018-2021",
            engine="D4 190hk",
            stage_name="Steg 1",
            price=4000,
        )
        db.find_scope_overrides.side_effect = lambda reseller_id, scope: (
            [by_label] if scope.get("engine") == "D4 190hk" else []
        )
        response = client.post(
            "/api/overrides",
            headers=RESELLER,
            json={
                "brand": "Volvo",
                "model": "XC60",
                "year": "2018-2021",
                "engine_ref": "engine-d4",
                "stage_name": "Steg 1",
                "price": 3000,
            },
        )
        assert response.status_code == 409
        db.insert_override.assert_not_awaited()

    def test_partial_scope_rejected(self, client, db):
        response = client.post(
            "/api/overrides",
            headers=RESELLER,
            json={"brand": "Volvo", "model": "XC60", "year": "2018-2021", "stage_name": "Steg 1"},
        )
        assert response.status_code == 422
        db.insert_override.assert_not_awaited()


def test_bulk_preview(client):
    response = client.post(
        "/api/bulk-overrides",
        headers=RESELLER,
        json={"brand": "Volvo", "model": "XC60", "stage1_price": "450", "preview": True},
    )
    assert response.status_code == 200
    [item] = response.json()["items"]
    assert item["new_price"] == 4500


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


class TestAdminRoutes:
    def test_missing_key(self, client):
        assert client.get("/api/import/history").status_code == 401

    def test_wrong_key(self, client):
        response = client.get("/api/import/history", headers={"X-Admin-Key": "wrong"})
        assert response.status_code == 403

    def test_not_configured(self, client):
        app.dependency_overrides[get_settings] = lambda: Settings(
            SUPABASE_URL="https://test.supabase.co", SUPABASE_KEY="k", API_ADMIN_KEY=""
        )
        assert client.get("/api/import/history", headers=ADMIN).status_code == 503

    def test_compare_is_recorded_in_history(self, client):
        vendor = {"Volvo": {"models": {"XC60": {"years": {"2018-2021": {"engines": {
            "D4 190hk": {"tunedHk": 235},
            "D5 235hk": {"tunedHk": 270},
        }}}}}}}
        data = client.post("/api/import/compare", headers=ADMIN, json={"catalog": vendor}).json()
        assert [m["engine"] for m in data["missing"]] == ["D5 235hk"]
        assert data["summary"]["total_records"] == 2

        [entry] = client.get("/api/import/history", headers=ADMIN).json()["history"]
        assert entry["kind"] == "compare"
        assert entry["missing"] == 1

    def test_compare_store_failure(self, client, db):
        db.fetch_brands.side_effect = RuntimeError("store down")
        response = client.post("/api/import/compare", headers=ADMIN, json={"catalog": {}})
        assert response.status_code == 502

    def test_compare_survives_history_failure(self, client):
        store = InMemoryKeyValueStore()
        store.set = AsyncMock(side_effect=RuntimeError("kv down"))
        app.dependency_overrides[get_kv_store] = lambda: store
        vendor = {"Volvo": {"models": {"XC60": {"years": {"2018-2021": {"engines": {
            "D5 235hk": {"tunedHk": 270},
        }}}}}}}
        response = client.post("/api/import/compare", headers=ADMIN, json={"catalog": vendor})
        assert response.status_code == 200
        assert response.json()["summary"]["total_missing"] == 1

    def test_upload_rejects_invalid_image(self, client):
        response = client.post(
            "/api/upload-image",
            headers=ADMIN,
            json={"image_data": "not base64!", "filename": "logo.png"},
        )
        assert response.status_code == 400


# ---------------------------------------------------------------------------
# Preferences & contact
# ---------------------------------------------------------------------------


class TestLanguagePreference:
    def test_round_trip(self, client):
        assert client.get("/api/preferences/c1/language").json()["language"] == "sv"
        response = client.put("/api/preferences/c1/language", json={"language": "en"})
        assert response.json()["language"] == "en"
        assert client.get("/api/preferences/c1/language").json()["language"] == "en"

    def test_unsupported(self, client):
        response = client.put("/api/preferences/c1/language", json={"language": "fr"})
        assert response.status_code == 422


class TestContact:
    BODY = {"name": "Anna", "email": "anna@example.se", "message": "Hej", "branch": "Göteborg"}

    def test_sent(self, client, mail):
        response = client.post("/api/contact", json=self.BODY)
        assert response.status_code == 200
        assert response.json() == {"message": "Tack! Vi återkommer så snart vi kan."}
        assert mail.sent[0]["reply_to"] == "anna@example.se"

    def test_reseller_id_ignored_on_public_form(self, client, mail, db):
        client.post("/api/contact", json={**self.BODY, "reseller_id": "test2"})
        db.fetch_reseller_config.assert_not_awaited()

    def test_delivery_failure(self, client, mail):
        mail.status = 500
        response = client.post("/api/contact", json={**self.BODY, "lang": "en"})
        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to send the request. Please try again."

    def test_reseller_contact(self, client, mail):
        response = client.post("/api/reseller-contact", json={**self.BODY, "reseller_id": "test2"})
        assert response.status_code == 200
        assert mail.sent[0]["to"] == ["verkstad@example.se"]

    def test_reseller_contact_requires_reseller(self, client):
        assert client.post("/api/reseller-contact", json=self.BODY).status_code == 422

    def test_invalid_email(self, client):
        body = {**self.BODY, "email": "not-an-email"}
        assert client.post("/api/contact", json=body).status_code == 422
