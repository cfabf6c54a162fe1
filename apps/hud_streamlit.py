from __future__ import annotations

import os
from pathlib import Path

import streamlit as st

from tradesim.monitoring import AuditLog
from tradesim.runtime import SimulationStore
from tradesim.simulator import stop_loss_distance_pct


def _format_pnl(value: float) -> str:
    return f"{value:+.2f}%"


def main() -> None:
    st.set_page_config(page_title="Trade Simulation HUD", layout="wide")
    st.title("Trade Simulations")

    default_store_path = os.getenv("TRADESIM_STORE_PATH", "runtime/simulations.json")
    default_audit_path = os.getenv("TRADESIM_AUDIT_PATH", "runtime/audit.log")

    store_path = Path(st.sidebar.text_input("Store path", value=default_store_path))
    audit_path = Path(st.sidebar.text_input("Audit log path", value=default_audit_path))

    setups = SimulationStore(store_path).list_all()
    if not setups:
        st.warning(f"No simulations found at {store_path}")
        return

    rows = []
    for setup in setups:
        rows.append(
            {
                "id": setup.id,
                "symbol": setup.symbol,
                "direction": setup.direction.value,
                "mode": setup.mode.value,
                "status": setup.status.value,
                "entry": setup.entry_price,
                "take_profit": ", ".join(f"{tp:g}" for tp in setup.take_profit),
                "stop_loss": setup.stop_loss,
                "sl_distance": f"{stop_loss_distance_pct(setup.entry_price, setup.stop_loss):.2f}%",
                "leverage": setup.leverage,
                "outcome": setup.result.outcome.value if setup.result else "",
                "duration": setup.result.duration if setup.result else "",
                "pnl": _format_pnl(setup.result.pnl) if setup.result else "",
            }
        )
    st.subheader("Simulations")
    st.dataframe(rows, use_container_width=True)

    selected_id = st.selectbox("Details", [setup.id for setup in setups])
    selected = next(setup for setup in setups if setup.id == selected_id)
    col_a, col_b, col_c = st.columns(3)
    col_a.metric("Status", selected.status.value)
    col_b.metric("Outcome", selected.result.outcome.value if selected.result else "n/a")
    col_c.metric("PnL", _format_pnl(selected.result.pnl) if selected.result else "n/a")

    st.subheader("Recent events")
    events = AuditLog(audit_path).read(simulation_id=selected_id, limit=50) if audit_path.exists() else []
    if events:
        st.json(events)
    else:
        st.caption("No audit events for this simulation")


if __name__ == "__main__":
    main()
