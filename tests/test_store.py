"""Tests for the SQLAlchemy conversation store."""
import pytest


@pytest.mark.unit
class TestConversationStore:

    def test_missing_user(self, store):
        assert store.get("42") is None

    def test_first_contact_creates_document(self, store):
        doc = store.save(42, {"conversation_id": "c1"})

        assert doc == {"_id": "42", "user_key": "42", "context": {"conversation_id": "c1"}, "type": "telegram"}
        assert store.get("42") == doc

    def test_save_overwrites_context(self, store):
        store.save("42", {"conversation_id": "c1", "step": 1})
        store.save("42", {"conversation_id": "c1", "step": 2, "timezone": "Asia/Seoul"})

        assert store.get("42")["context"] == {"conversation_id": "c1", "step": 2, "timezone": "Asia/Seoul"}

    def test_find_by_user_id(self, store):
        store.save("K1", {"user": {"id": "U1"}})
        store.save("K2", {"user": {"id": "U2"}})

        assert store.find_by_user_id("U1")["user_key"] == "K1"
        assert store.find_by_user_id("U3") is None

    def test_find_by_user_id_filters_channel(self, store):
        store.save("K1", {"user": {"id": "U1"}}, channel="kakao")
        assert store.find_by_user_id("U1") is None
        assert store.find_by_user_id("U1", channel="kakao")["_id"] == "K1"

    def test_user_id_follows_context(self, store):
        store.save("K1", {"user": {"id": "U1"}})
        store.save("K1", {})
        assert store.find_by_user_id("U1") is None
