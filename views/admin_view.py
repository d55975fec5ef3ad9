import streamlit as st

from use_cases import rbac_policy
from use_cases.auth_controller import AuthController


def render_admin_panel(controller: AuthController):
    if not rbac_policy.enforce(controller.user, "VIEW_ADMIN"):
        st.error("Admin access required.")
        return

    st.subheader("⚙️ Platform statistics")
    health = controller.client.health_check()
    if health.success:
        st.caption("🟢 Backend is healthy")
    else:
        st.warning(f"🔴 Backend health check failed: {health.error}")

    resp = controller.client.get_admin_stats()
    if not resp.success:
        st.error(f"Failed to load admin stats: {resp.error}")
        return

    stats = resp.data if isinstance(resp.data, dict) else {}
    numeric = {k: v for k, v in stats.items() if isinstance(v, (int, float)) and not isinstance(v, bool)}
    if numeric:
        cols = st.columns(min(len(numeric), 4))
        for i, (key, value) in enumerate(numeric.items()):
            cols[i % len(cols)].metric(key.replace("_", " ").title(), value)

    rest = {k: v for k, v in stats.items() if k not in numeric}
    if rest:
        with st.expander("Details", expanded=False):
            st.json(rest)
