import streamlit as st
import streamlit.components.v1 as components
import os

from infrastructure.observability import setup_observability
setup_observability()

from utils import session_manager
from use_cases import auth_flow, bootstrap, rbac_policy
from views import admin_view, login_view, profile_view
from datetime import datetime, timezone

# --- PAGE SETTINGS ---
st.set_page_config(page_title="Innoverse", page_icon="🚀", layout="wide", initial_sidebar_state="expanded")

FORCE_HTTPS = os.getenv("FORCE_HTTPS", "False").lower() == "true"

# Health Check (Basic load-balancer heartbeat)
if st.query_params.get("health") == "1":
    st.write({"status": "ok", "version": "1.0", "time": datetime.now(timezone.utc).isoformat()})
    st.stop()

if FORCE_HTTPS:
    proto = st.context.headers.get("x-forwarded-proto", "http").lower()
    if proto != "https":
        # Streamlit cannot issue a redirect mid-script; the proxy should.
        st.error("🚨 Insecure connection. Please use HTTPS.")
        st.stop()

components.html(
    """
    <script>
    var meta1 = document.createElement('meta');
    meta1.httpEquiv = "X-Content-Type-Options";
    meta1.content = "nosniff";
    document.getElementsByTagName('head')[0].appendChild(meta1);

    var meta2 = document.createElement('meta');
    meta2.name = "referrer";
    meta2.content = "no-referrer";
    document.getElementsByTagName('head')[0].appendChild(meta2);
    </script>
    """,
    height=0,
)

# --- STARTUP ORCHESTRATION ---
startup_result = bootstrap.run_startup()
if startup_result.status == "STOP":
    st.stop()

# --- AUTH GATE ---
# 1. Orchestration: init session -> bootstrap -> OAuth callback
auth_result = auth_flow.ensure_authenticated_session()

# 2. Still anonymous -> login screen
if auth_result.status == "STOP":
    login_view.render_auth_screen()
    st.stop()

# === MAIN INTERFACE ===
controller = session_manager.get_auth_controller()
user = controller.user

PAGES = {"👤 Profile": "VIEW_PROFILE", "⚙️ Admin": "VIEW_ADMIN"}

# Safe default for headless/bare imports where st.stop() might not halt execution.
page = "👤 Profile"

with st.sidebar:
    if user is not None:
        st.markdown(f"**{user.name or user.email}**")
        st.caption("Administrator" if user.role == "admin" else "Member")

    if st.button("Sign out", key="logout_btn", type="secondary"):
        session_manager.logout()

    st.divider()
    allowed = [label for label, action in PAGES.items() if action != "VIEW_ADMIN" or st.session_state.is_admin]
    page = st.radio("Navigation", allowed, label_visibility="collapsed") or page

if user is not None:
    if page == "⚙️ Admin" and rbac_policy.enforce(user, "VIEW_ADMIN"):
        admin_view.render_admin_panel(controller)
    else:
        profile_view.render_profile(controller)
