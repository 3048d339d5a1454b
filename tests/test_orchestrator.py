"""Tests for postmates_api.core.orchestrator.WorkflowOrchestrator."""

import os
from dataclasses import replace
from unittest.mock import patch, MagicMock

import pytest

from postmates_api.core.errors import RemoteAPIError
from postmates_api.core.models import CartItem, CatalogItem, LocationSelection
from postmates_api.core.orchestrator import WorkflowOrchestrator, first_store_uuid
from postmates_api.core.workflow import CartSession, Stage


_BASE_ENV = {
    "POSTMATES_BASE_URL": "https://postmates.test/api",
    "DEFAULT_ADDRESS": "123 Main St",
    "DEFAULT_QUERY": "pizza",
    "DEBUG": "false",
    "REQUEST_TIMEOUT": "",
}

STORE_MENU = {
    "data": {
        "uuid": "store-1",
        "catalogSectionsMap": {
            "section-1": [{"payload": {"standardItemsPayload": {"catalogItems": [
                {"uuid": "item-1", "title": "Margherita", "price": 1299, "subsectionUuid": "sub-1"},
            ]}}}],
        },
    }
}


def _make_orchestrator(env_overrides=None):
    env = dict(_BASE_ENV)
    if env_overrides:
        env.update(env_overrides)
    with patch.dict(os.environ, env, clear=True):
        orchestrator = WorkflowOrchestrator(env_file="/nonexistent/.env")
    return orchestrator


def _mock_workflow():
    item = CatalogItem("item-1", "store-1", "section-1", "sub-1", 1299, "Margherita")
    line = CartItem(item=item)
    located = CartSession(stage=Stage.LOCATED, cookies={"uev2.loc": "loc"})
    searched = CartSession(stage=Stage.SEARCHED, cookies={"uev2.loc": "loc", "jwt-session": "s"})
    cart = CartSession(
        stage=Stage.CART_OPEN,
        cookies=searched.cookies,
        draft_order_uuid="draft-1",
        cart_uuid="cart-1",
        store_uuid="store-1",
        items=(line,),
    )
    priced = replace(cart, stage=Stage.CART_PRICED)

    workflow = MagicMock()
    workflow.locate.return_value = (LocationSelection("place-1", "google_places"), located)
    workflow.search.return_value = (
        {"data": {"feedItems": [{"store": {"storeUuid": "store-1"}}]}},
        searched,
    )
    workflow.store_menu.return_value = STORE_MENU
    workflow.create_cart.return_value = ({"status": "success"}, cart)
    workflow.compute_fee.return_value = ({"data": {"total": 1500}}, priced)
    workflow.remove_item.return_value = (
        {"status": "success"},
        replace(cart, items=()),
    )
    return workflow


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def test_config_loaded_from_environment():
    orch = _make_orchestrator({"REQUEST_TIMEOUT": "30", "DEBUG": "true"})
    assert orch.base_url == "https://postmates.test/api"
    assert orch.timeout == 30.0
    assert orch.debug is True
    assert orch.default_address == "123 Main St"


def test_defaults_without_environment():
    with patch.dict(os.environ, {}, clear=True):
        orch = WorkflowOrchestrator(env_file="/nonexistent/.env")
    assert orch.base_url == "https://postmates.com/api"
    assert orch.timeout is None
    assert orch.debug is False


def test_validate_config_valid():
    assert _make_orchestrator().validate_config() is True


def test_validate_config_missing_address_and_query():
    orch = _make_orchestrator({"DEFAULT_ADDRESS": "", "DEFAULT_QUERY": ""})
    assert orch.validate_config() is False
    assert orch.validate_config("1 Market St", "tacos") is True


def test_validate_config_missing_base_url():
    orch = _make_orchestrator({"POSTMATES_BASE_URL": ""})
    assert orch.validate_config() is False


# ---------------------------------------------------------------------------
# run()
# ---------------------------------------------------------------------------

def test_run_success():
    orch = _make_orchestrator()
    workflow = _mock_workflow()
    with patch.object(orch, "_make_workflow", return_value=workflow):
        results = orch.run()
    assert results["success"] is True
    assert results["fees"] == {"data": {"total": 1500}}
    summary = results["summary"]
    assert summary["store_uuid"] == "store-1"
    assert summary["item"] == "Margherita"
    assert summary["draft_order_uuid"] == "draft-1"
    assert summary["stage"] == "cart_priced"
    workflow.locate.assert_called_once_with("123 Main St")
    workflow.store_menu.assert_called_once_with("store-1")
    workflow.remove_item.assert_not_called()


def test_run_threads_session_between_steps():
    orch = _make_orchestrator()
    workflow = _mock_workflow()
    with patch.object(orch, "_make_workflow", return_value=workflow):
        orch.run()
    located = workflow.locate.return_value[1]
    searched = workflow.search.return_value[1]
    assert workflow.search.call_args[0][0] is located
    assert workflow.create_cart.call_args[0][0] is searched


def test_run_with_remove():
    orch = _make_orchestrator()
    workflow = _mock_workflow()
    with patch.object(orch, "_make_workflow", return_value=workflow):
        results = orch.run(remove_after=True)
    assert results["success"] is True
    assert results["summary"]["items_in_cart"] == 0
    workflow.remove_item.assert_called_once()


def test_run_item_not_on_menu():
    orch = _make_orchestrator()
    workflow = _mock_workflow()
    with patch.object(orch, "_make_workflow", return_value=workflow):
        results = orch.run(item_title="Calzone")
    assert results["success"] is False
    assert "Calzone" in results["error"]
    workflow.create_cart.assert_not_called()


def test_run_no_store_in_search_results():
    orch = _make_orchestrator()
    workflow = _mock_workflow()
    workflow.search.return_value = ({"data": {"feedItems": []}}, workflow.search.return_value[1])
    with patch.object(orch, "_make_workflow", return_value=workflow):
        results = orch.run()
    assert results["success"] is False
    assert "No store" in results["error"]


def test_run_records_remote_status():
    orch = _make_orchestrator()
    workflow = _mock_workflow()
    workflow.search.side_effect = RemoteAPIError(403, "Forbidden", {"error": "forbidden"})
    with patch.object(orch, "_make_workflow", return_value=workflow):
        results = orch.run()
    assert results["success"] is False
    assert results["status"] == 403
    assert "completed_at" in results


# ---------------------------------------------------------------------------
# first_store_uuid
# ---------------------------------------------------------------------------

def test_first_store_uuid():
    data = {"data": {"feedItems": [{"type": "CAROUSEL"}, {"store": {"storeUuid": "s-2"}}]}}
    assert first_store_uuid(data) == "s-2"
    assert first_store_uuid({}) is None
    assert first_store_uuid(None) is None
