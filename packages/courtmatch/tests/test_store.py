"""Tests for the Supabase store wrapper using a mocked client."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
from postgrest.exceptions import APIError

from courtmatch.config import StoreConfig
from courtmatch.store import StoreError, SupabaseFacilityStore


def _store(client, page_size=2):
    return SupabaseFacilityStore(StoreConfig(url="u", service_key="k", page_size=page_size), client)


def _select_chain(client):
    return client.table.return_value.select.return_value.eq.return_value.order.return_value.range


def test_fetch_active_pages(monkeypatch):
    client = MagicMock()
    range_ = _select_chain(client)
    range_.return_value.execute.side_effect = [
        SimpleNamespace(data=[{"id": 1, "name": "A", "phone": None}, {"id": 2, "name": "B", "phone": "5"}]),
        SimpleNamespace(data=[{"id": 3, "name": "C", "phone": None}]),
    ]
    facilities = _store(client).fetch_active(["phone"])

    assert [f.id for f in facilities] == ["1", "2", "3"]
    assert facilities[1].existing_attributes == {"phone": "5"}
    client.table.assert_called_with("facilities")
    client.table.return_value.select.assert_called_with("id, name, phone")
    assert [c.args for c in range_.call_args_list] == [(0, 1), (2, 3)]


def test_fetch_active_error():
    client = MagicMock()
    _select_chain(client).return_value.execute.side_effect = APIError({"message": "permission denied"})
    with pytest.raises(StoreError, match="permission denied"):
        _store(client).fetch_active()


def test_update_and_deactivate():
    client = MagicMock()
    store = _store(client)
    store.update("f1", {"total_courts": 4})
    store.deactivate("f2")
    update = client.table.return_value.update
    assert update.call_args_list[0].args == ({"total_courts": 4},)
    assert update.call_args_list[1].args == ({"status": "inactive"},)
    assert update.return_value.eq.call_args_list[1].args == ("id", "f2")


def test_update_error():
    client = MagicMock()
    client.table.return_value.update.return_value.eq.return_value.execute.side_effect = APIError(
        {"message": "violates check constraint"}
    )
    with pytest.raises(StoreError, match="check constraint"):
        _store(client).update("f1", {"total_courts": -1})


def test_update_transport_error():
    client = MagicMock()
    client.table.return_value.update.return_value.eq.return_value.execute.side_effect = (
        httpx.ConnectError("connection reset")
    )
    with pytest.raises(StoreError, match="connection reset"):
        _store(client).update("f1", {"total_courts": 4})


def test_fetch_active_transport_error():
    client = MagicMock()
    _select_chain(client).return_value.execute.side_effect = httpx.ReadTimeout("timed out")
    with pytest.raises(StoreError, match="timed out"):
        _store(client).fetch_active()
