import streamlit as st
import auth
from utils import session_manager

FEATURES = [
    ("💻", "Choose Your Track", "Web Dev, AI/ML, Game Dev, Mobile or DSA"),
    ("👥", "Team Collaboration", "Connect with peers in your coding track and grow together"),
    ("🏆", "Weekly Challenges", "Complete tasks, earn badges, and climb the leaderboard"),
    ("📚", "Learning Resources", "Access curated resources tailored to your skill level"),
]


def render_auth_screen():
    st.title("🚀 Welcome to Innoverse")
    st.caption("The coding community platform for learning together.")

    cols = st.columns(len(FEATURES))
    for col, (icon, title, description) in zip(cols, FEATURES):
        with col:
            st.markdown(f"### {icon}\n**{title}**")
            st.caption(description)

    st.divider()

    error = st.session_state.get("sign_in_error")
    if error:
        st.error(f"Sign-in failed: {error}")

    if st.session_state.get("auth_loading"):
        st.info("Signing in...")
        return

    # The callback must echo this state back.
    auth_url = auth.build_google_auth_url(session_manager.issue_oauth_state())

    if auth_url is None:
        st.warning("Google sign-in is not configured (GOOGLE_CLIENT_ID).")
        return

    st.link_button("Continue with Google", auth_url, type="primary", width="stretch")
    st.caption("By continuing you agree to the Terms of Service and Privacy Policy.")
