"""
Tests for the local JSON database.
"""
import pytest
import tempfile
import os
import json
from aegis_suite.core import config, store
from aegis_suite.core.strategies import build_allocation


@pytest.fixture
def temp_data_dir(monkeypatch):
    """Create a temporary directory for test data."""
    with tempfile.TemporaryDirectory() as tmpdir:
        monkeypatch.setattr(config, "DATA_DIR", tmpdir)
        yield tmpdir


def make_rec(title="Moderate - 01/02/2026", profile="Moderate", strategy="All Weather Portfolio",
             created_at="2026-02-01T10:00:00", **kw):
    return store.Recommendation(
        title=title,
        risk_profile=profile,
        horizon="5 years (Medium Term)",
        strategy=strategy,
        allocation=build_allocation("allweather", profile),
        created_at=created_at,
        **kw,
    )


@pytest.mark.unit
class TestRecommendationPersistence:
    """Tests for saving and loading recommendations."""

    def test_ids_auto_increment(self, temp_data_dir):
        a = store.save_recommendation(make_rec())
        b = store.save_recommendation(make_rec())
        assert (a.id, b.id) == (1, 2)
        assert os.path.exists(os.path.join(temp_data_dir, "recommendations", "1.json"))

    def test_save_and_load(self, temp_data_dir):
        rec = store.save_recommendation(make_rec(client_name="Jane Doe", investment_amount=50_000))
        loaded = store.load_recommendation(rec.id)
        assert loaded is not None
        assert loaded.client_name == "Jane Doe"
        assert loaded.investment_amount == 50_000
        assert loaded.allocation == rec.allocation
        assert loaded.status == store.STATUS_DRAFT

    def test_load_missing_returns_none(self, temp_data_dir):
        assert store.load_recommendation(99) is None

    def test_invalid_status_rejected(self, temp_data_dir):
        with pytest.raises(ValueError):
            store.save_recommendation(make_rec(status="Archived"))

    def test_list_newest_first(self, temp_data_dir):
        store.save_recommendation(make_rec(title="old", created_at="2025-01-01T00:00:00"))
        store.save_recommendation(make_rec(title="new", created_at="2026-01-01T00:00:00"))
        assert [r.title for r in store.list_recommendations()] == ["new", "old"]
        assert [r.title for r in store.recent_recommendations(1)] == ["new"]

    def test_delete_and_clear(self, temp_data_dir):
        a = store.save_recommendation(make_rec())
        store.save_recommendation(make_rec())
        assert store.delete_recommendation(a.id) is True
        assert store.delete_recommendation(a.id) is False
        assert store.count_recommendations() == 1
        assert store.clear_recommendations() == 1
        assert store.list_recommendations() == []

    def test_set_status(self, temp_data_dir):
        rec = store.save_recommendation(make_rec())
        assert store.set_status(rec.id, store.STATUS_FINAL).status == store.STATUS_FINAL
        assert store.load_recommendation(rec.id).status == store.STATUS_FINAL
        assert store.set_status(42, store.STATUS_FINAL) is None
        with pytest.raises(ValueError):
            store.set_status(rec.id, "Done")

    def test_corrupt_record_skipped(self, temp_data_dir):
        store.save_recommendation(make_rec())
        with open(os.path.join(temp_data_dir, "recommendations", "2.json"), "w") as f:
            f.write("{not json")
        assert len(store.list_recommendations()) == 1

    def test_non_object_record_skipped(self, temp_data_dir):
        store.save_client(store.Client(name="Ana"))
        for rid, raw in ((2, "[]"), (3, "3")):
            with open(os.path.join(temp_data_dir, "clients", f"{rid}.json"), "w") as f:
                f.write(raw)
        assert [c.name for c in store.list_clients()] == ["Ana"]
        assert [r["id"] for r in store.iter_rows(store.CLIENTS)] == [1]

    def test_record_missing_fields_skipped(self, temp_data_dir):
        store.save_recommendation(make_rec())
        with open(os.path.join(temp_data_dir, "recommendations", "2.json"), "w") as f:
            json.dump({"title": "half a record"}, f)
        recs = store.list_recommendations()
        assert [r.id for r in recs] == [1]
        assert len(store.query_recommendations()) == 1

    def test_parse_id(self):
        assert store.parse_id(None) is None
        assert store.parse_id(4) == 4
        assert store.parse_id("12") == 12
        for bad in ("abc", 0, -1, True, 2.0):
            with pytest.raises(ValueError):
                store.parse_id(bad)

    def test_unknown_keys_ignored(self, temp_data_dir):
        store.bulk_insert(store.RECOMMENDATIONS, [dict(make_rec().to_dict(), id=5, legacy_field=1)])
        assert store.load_recommendation(5).id == 5


@pytest.mark.unit
class TestRecommendationQuery:
    """Tests for the history query."""

    @pytest.fixture
    def seeded(self, temp_data_dir):
        store.save_recommendation(make_rec(title="Beta plan", profile="Aggressive",
                                           created_at="2026-01-03T00:00:00", client_name="Ann"))
        store.save_recommendation(make_rec(title="Alpha plan", profile="Conservative",
                                           created_at="2026-01-01T00:00:00", client_name="Bob",
                                           status=store.STATUS_FINAL))
        store.save_recommendation(make_rec(title="Gamma plan", profile="Moderate",
                                           strategy="Traditional 60/40",
                                           created_at="2026-01-02T00:00:00", client_name="Cy"))

    def test_search_matches_title_client_strategy(self, seeded):
        assert [r.title for r in store.query_recommendations(search="alpha")] == ["Alpha plan"]
        assert [r.title for r in store.query_recommendations(search="ann")] == ["Beta plan"]
        assert [r.title for r in store.query_recommendations(search="60/40")] == ["Gamma plan"]

    def test_filters(self, seeded):
        assert [r.title for r in store.query_recommendations(risk_profile="aggressive")] == ["Beta plan"]
        assert [r.title for r in store.query_recommendations(status=store.STATUS_FINAL)] == ["Alpha plan"]
        assert len(store.query_recommendations(risk_profile="all", status="all")) == 3

    def test_sorting(self, seeded):
        def titles(sort):
            return [r.title for r in store.query_recommendations(sort_by=sort)]
        assert titles("date-desc") == ["Beta plan", "Gamma plan", "Alpha plan"]
        assert titles("date-asc") == ["Alpha plan", "Gamma plan", "Beta plan"]
        assert titles("name-asc") == ["Alpha plan", "Beta plan", "Gamma plan"]
        assert titles("name-desc") == ["Gamma plan", "Beta plan", "Alpha plan"]

    def test_unknown_sort_raises(self, seeded):
        with pytest.raises(ValueError):
            store.query_recommendations(sort_by="random")


@pytest.mark.unit
class TestClients:
    """Tests for client CRUD."""

    def test_new_client_defaults(self):
        c = store.new_client()
        assert c.id is None
        assert c.name == ""

    def test_save_load_delete(self, temp_data_dir):
        c = store.new_client()
        c.name = "Maria Silva"
        c.email = "maria@example.com"
        store.save_client(c)
        assert c.id == 1

        loaded = store.load_client(1)
        assert loaded.name == "Maria Silva"
        assert loaded.email == "maria@example.com"

        assert store.delete_client(1) is True
        assert store.load_client(1) is None

    def test_search(self, temp_data_dir):
        store.save_client(store.Client(name="Maria Silva", phone="555-0101"))
        store.save_client(store.Client(name="John Smith", email="john@example.com", tax_id="123"))
        assert [c.name for c in store.search_clients("SILVA")] == ["Maria Silva"]
        assert [c.name for c in store.search_clients("example.com")] == ["John Smith"]
        assert [c.name for c in store.search_clients("0101")] == ["Maria Silva"]
        assert len(store.search_clients("  ")) == 2


@pytest.mark.unit
class TestAssets:
    """Tests for the assets table and database seeding."""

    def test_initialize_seeds_once(self, temp_data_dir):
        assert store.initialize_db() == 16
        assert store.initialize_db() == 0
        assert len(store.list_assets()) == 16
        for t in store.TABLES:
            assert os.path.isdir(os.path.join(temp_data_dir, t))

    def test_filter_by_category(self, temp_data_dir):
        store.initialize_db()
        crypto = store.list_assets("Crypto")
        assert len(crypto) == 4
        assert all(a.category == "Crypto" for a in crypto)

    def test_asset_crud(self, temp_data_dir):
        a = store.save_asset(store.Asset(name="Gold ETF", type="Alternative", category="Commodities", ticker="IAU"))
        assert store.load_asset(a.id).ticker == "IAU"
        assert store.delete_asset(a.id) is True
        assert store.load_asset(a.id) is None

    def test_unknown_table_rejected(self, temp_data_dir):
        with pytest.raises(ValueError):
            store.count("portfolios")
