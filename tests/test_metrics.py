from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from storyledger.api.app import create_app
from storyledger.runtime import metrics
from storyledger.runtime.executor import StoryLedgerExecutor


def test_prometheus_text_is_sorted_and_prefixed() -> None:
    metrics.reset()
    metrics.inc_counter("tx_applied_total")
    metrics.inc_counter("tx_applied_total", 2)
    metrics.inc_counter("  ")
    metrics.set_gauge("stories", 4)

    text = metrics.format_prometheus()
    lines = text.strip().splitlines()
    assert lines[0].startswith("storyledger_uptime_ms ")
    assert "storyledger_tx_applied_total 3" in lines
    assert "storyledger_stories 4" in lines
    assert text.endswith("\n")


def test_metrics_route_is_off_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STORYLEDGER_METRICS_ENABLED", raising=False)
    c = TestClient(create_app(boot_runtime=False))
    assert c.get("/v1/metrics").status_code == 404


def test_metrics_route_reports_ledger_activity(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORYLEDGER_METRICS_ENABLED", "1")
    metrics.reset()

    app = create_app(boot_runtime=False)
    app.state.executor = StoryLedgerExecutor(admin_principal="contract-owner", ledger_id="storyledger-test")
    c = TestClient(app)
    c.post("/v1/stories", json={"title": "t"}, headers={"X-Principal": "u1"})
    c.post("/v1/stories/1/complete", headers={"X-Principal": "u1"})

    body = c.get("/v1/metrics").text
    assert "storyledger_tx_applied_total 1" in body
    assert "storyledger_tx_rejected_unauthorized 1" in body
    assert "storyledger_stories 1" in body


def test_metrics_route_refreshes_ledger_gauges(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORYLEDGER_METRICS_ENABLED", "1")
    metrics.reset()

    ex = StoryLedgerExecutor(admin_principal="contract-owner", ledger_id="storyledger-test")
    ex.create_story("u1", "a")
    ex.create_story("u1", "b")
    ex.add_chapter("u2", 1, "c")
    ex.create_plot_decision("u1", 1, "l", "r")
    ex.create_plot_decision("u1", 2, "l", "r")
    ex.vote_on_plot("u3", 1, 1, 0)
    ex.vote_on_plot("u4", 1, 1, 1)
    ex.close_voting("contract-owner", 2, 2)
    ex.complete_story("contract-owner", 2)

    app = create_app(boot_runtime=False)
    app.state.executor = ex
    metrics.reset()

    r = TestClient(app).get("/v1/metrics")
    assert r.headers["content-type"].startswith("text/plain")
    lines = r.text.splitlines()
    for expected in (
        "storyledger_stories 2",
        "storyledger_stories_complete 1",
        "storyledger_chapters 1",
        "storyledger_contributors 1",
        "storyledger_plot_decisions 2",
        "storyledger_plot_decisions_open 1",
        "storyledger_votes_cast 2",
    ):
        assert expected in lines
