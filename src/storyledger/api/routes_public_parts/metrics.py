from __future__ import annotations

from fastapi import APIRouter, Request, Response

from storyledger.runtime.metrics import format_prometheus, metrics_enabled, set_gauge

router = APIRouter()

_PROM_CONTENT_TYPE = "text/plain; version=0.0.4"


def _refresh_ledger_gauges(request: Request) -> None:
    """Recompute ledger-shape gauges from the attached executor at scrape time."""
    ex = getattr(request.app.state, "executor", None)
    if ex is None:
        return
    st = ex.read_state()
    decisions = list(st.plot_decisions.values())
    set_gauge("stories", len(st.stories))
    set_gauge("stories_complete", sum(1 for s in st.stories.values() if s.is_complete))
    set_gauge("chapters", len(st.chapters))
    set_gauge("contributors", len(st.contributors))
    set_gauge("plot_decisions", len(decisions))
    set_gauge("plot_decisions_open", sum(1 for d in decisions if d.is_open))
    set_gauge("votes_cast", sum(d.votes_a + d.votes_b for d in decisions))


@router.get("/metrics")
def metrics(request: Request) -> Response:
    """Prometheus text: tx counters plus ledger gauges.

    Off unless STORYLEDGER_METRICS_ENABLED is truthy.
    """
    if not metrics_enabled():
        return Response(status_code=404, content="not_found\n", media_type="text/plain")
    _refresh_ledger_gauges(request)
    return Response(content=format_prometheus(), media_type=_PROM_CONTENT_TYPE)
