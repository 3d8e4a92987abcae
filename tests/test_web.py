"""Tests for the JSON API."""

import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from mneme.web.app import create_app


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def client(temp_dir):
    """Create a test client backed by a temporary database."""
    with patch.dict("os.environ", {"MNEME_STATE_DIR": str(temp_dir / ".mneme")}):
        # Clear the lru_cache to pick up new paths
        from mneme.web import dependencies

        dependencies.get_database.cache_clear()
        dependencies.get_scheduler.cache_clear()

        app = create_app()
        yield TestClient(app)

        dependencies.get_database.cache_clear()
        dependencies.get_scheduler.cache_clear()


@pytest.fixture
def language(client):
    response = client.post(
        "/languages", json={"name": "Spanish", "code": "es", "flag_emoji": "🇪🇸"}
    )
    assert response.status_code == 201
    return response.json()


def _add_word(client, language_id, word="perro", translation="dog", **extra):
    response = client.post(
        "/vocabulary",
        json={"language_id": language_id, "word": word, "translation": translation, **extra},
    )
    assert response.status_code == 201
    return response.json()


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestReviews:
    """Tests for the review endpoints."""

    def test_due_empty(self, client):
        response = client.get("/reviews/due")
        assert response.status_code == 200
        assert response.json() == []

    def test_new_word_is_due(self, client, language):
        item = _add_word(client, language["id"])

        due = client.get("/reviews/due").json()

        assert len(due) == 1
        assert due[0]["item"]["word"] == "perro"
        assert due[0]["card"]["item_id"] == item["id"]
        assert due[0]["card"]["ease_factor"] == 2.5
        assert due[0]["card"]["repetitions"] == 0
        assert due[0]["card"]["last_reviewed"] is None

    def test_submit_review(self, client, language):
        item = _add_word(client, language["id"])

        response = client.post(f"/reviews/{item['id']}", json={"quality": 5})

        assert response.status_code == 200
        body = response.json()
        assert body["card_id"] == item["id"]
        assert body["quality"] == 5
        assert body["repetitions"] == 1
        assert body["interval_days"] == 1
        assert body["ease_factor"] == pytest.approx(2.6)
        assert body["lapsed"] is False

        # Reviewed card is no longer due
        assert client.get("/reviews/due").json() == []

    def test_hard_review_reports_lapse(self, client, language):
        item = _add_word(client, language["id"])
        body = client.post(f"/reviews/{item['id']}", json={"quality": 1}).json()
        assert body["lapsed"] is True
        assert body["repetitions"] == 0

    @pytest.mark.parametrize("quality", [0, 2, 4, 6, True, "3", "5", 3.0, None])
    def test_invalid_quality(self, client, language, quality):
        item = _add_word(client, language["id"])

        response = client.post(f"/reviews/{item['id']}", json={"quality": quality})

        assert response.status_code == 422
        assert response.json()["error"]["type"] == "InvalidQuality"
        # Card untouched and still due, nothing logged
        due = client.get("/reviews/due").json()
        assert len(due) == 1
        assert due[0]["card"]["last_reviewed"] is None
        assert client.get("/stats").json()["total_reviews"] == 0

    def test_unknown_card(self, client):
        response = client.post("/reviews/999", json={"quality": 3})
        assert response.status_code == 404
        assert response.json()["error"]["type"] == "NotFound"

    def test_due_limit(self, client, language):
        for i in range(4):
            _add_word(client, language["id"], word=f"w{i}")

        assert len(client.get("/reviews/due", params={"limit": 2}).json()) == 2
        assert client.get("/reviews/due", params={"limit": 0}).json() == []
        assert client.get("/reviews/due", params={"limit": -1}).status_code == 422

    def test_default_limit_from_environment(self, temp_dir):
        env = {"MNEME_STATE_DIR": str(temp_dir / ".mneme"), "MNEME_REVIEW_LIMIT": "2"}
        with patch.dict("os.environ", env):
            from mneme.web import dependencies

            dependencies.get_database.cache_clear()
            dependencies.get_scheduler.cache_clear()
            client = TestClient(create_app())

            language = client.post(
                "/languages", json={"name": "Spanish", "code": "es", "flag_emoji": "x"}
            ).json()
            for i in range(3):
                _add_word(client, language["id"], word=f"w{i}")

            assert len(client.get("/reviews/due").json()) == 2

            dependencies.get_database.cache_clear()
            dependencies.get_scheduler.cache_clear()

    def test_bad_limit_in_environment(self, temp_dir):
        env = {"MNEME_STATE_DIR": str(temp_dir / ".mneme"), "MNEME_REVIEW_LIMIT": "many"}
        with patch.dict("os.environ", env):
            from mneme.web import dependencies

            dependencies.get_database.cache_clear()
            dependencies.get_scheduler.cache_clear()
            client = TestClient(create_app())

            response = client.get("/reviews/due")

            assert response.status_code == 500
            assert response.json()["error"]["type"] == "ConfigError"
            assert "MNEME_REVIEW_LIMIT" in response.json()["error"]["message"]

            dependencies.get_database.cache_clear()
            dependencies.get_scheduler.cache_clear()


class TestContent:
    """Tests for language and vocabulary endpoints."""

    def test_list_languages(self, client, language):
        response = client.get("/languages")
        assert response.status_code == 200
        assert [lang["code"] for lang in response.json()] == ["es"]

    def test_invalid_language(self, client):
        response = client.post(
            "/languages", json={"name": "Spanish", "code": "e5", "flag_emoji": "x"}
        )
        assert response.status_code == 422
        assert response.json()["error"]["type"] == "ValidationFailed"

    def test_duplicate_language(self, client, language):
        response = client.post(
            "/languages", json={"name": "Spanish", "code": "sp", "flag_emoji": "x"}
        )
        assert response.status_code == 422

    def test_vocabulary_for_missing_language(self, client):
        response = client.post(
            "/vocabulary", json={"language_id": 5, "word": "hola", "translation": "hi"}
        )
        assert response.status_code == 404

    def test_list_and_get_vocabulary(self, client, language):
        item = _add_word(client, language["id"], example_sentence="El perro corre.")

        listed = client.get(f"/languages/{language['id']}/vocabulary").json()
        assert [i["id"] for i in listed] == [item["id"]]

        fetched = client.get(f"/vocabulary/{item['id']}").json()
        assert fetched["example_sentence"] == "El perro corre."
        assert client.get("/vocabulary/999").status_code == 404

    def test_search(self, client, language):
        _add_word(client, language["id"], word="casa", translation="house")
        _add_word(client, language["id"], word="gato", translation="cat")

        response = client.get("/vocabulary/search", params={"q": "hous"})
        assert [i["word"] for i in response.json()] == ["casa"]

    def test_delete_vocabulary(self, client, language):
        item = _add_word(client, language["id"])

        assert client.delete(f"/vocabulary/{item['id']}").status_code == 204
        assert client.get("/reviews/due").json() == []
        assert client.delete(f"/vocabulary/{item['id']}").status_code == 404

    def test_delete_language_cascades(self, client, language):
        _add_word(client, language["id"])

        assert client.delete(f"/languages/{language['id']}").status_code == 204
        assert client.get("/reviews/due").json() == []
        assert client.get(f"/languages/{language['id']}/vocabulary").status_code == 404

    def test_stats(self, client, language):
        item = _add_word(client, language["id"])
        _add_word(client, language["id"], word="gato", translation="cat")
        client.post(f"/reviews/{item['id']}", json={"quality": 3})

        stats = client.get("/stats").json()
        assert stats["total_items"] == 2
        assert stats["total_reviews"] == 1
        assert stats["due_now"] == 1
        assert stats["success_rate"] == 1.0
        assert stats["by_language"] == {"Spanish": 2}
