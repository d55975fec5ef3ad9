import streamlit as st

import auth
from use_cases import rbac_policy
from use_cases.auth_controller import AuthController
from use_cases.session_models import CODING_TRACKS, STUDY_YEARS, User, join_coding_tracks
from utils import session_manager


def _render_onboarding(controller: AuthController, user: User):
    st.success(f"Welcome to Innoverse, {user.name or user.email}! Pick a coding track to get started.")
    current = user.profile.coding_tracks if user.profile else ()
    with st.form("onboarding_form"):
        tracks = st.multiselect(
            "Coding tracks",
            options=list(CODING_TRACKS),
            default=list(current) or ["dsa"],
            format_func=lambda t: CODING_TRACKS[t],
        )
        submitted = st.form_submit_button("Start learning", type="primary")
    if submitted:
        try:
            controller.update_profile({"profile": {"coding_track": join_coding_tracks(tracks)}})
            st.session_state.show_onboarding = False
            st.rerun()
        except auth.AuthError as e:
            st.error(f"Could not save your track: {e}")


def _render_profile_form(controller: AuthController, user: User):
    profile = user.profile
    year_options = [""] + list(STUDY_YEARS)
    current_year = profile.year if profile and profile.year in STUDY_YEARS else ""

    with st.form("profile_form"):
        bio = st.text_area("Bio", value=(profile.bio if profile else "") or "")
        college = st.text_input("College", value=(profile.college if profile else "") or "")
        course = st.text_input("Course", value=(profile.course if profile else "") or "")
        year = st.selectbox(
            "Year",
            options=year_options,
            index=year_options.index(current_year),
            format_func=lambda y: STUDY_YEARS.get(y, "Select year"),
        )
        interests_raw = st.text_input(
            "Interests (comma-separated)",
            value=", ".join(profile.interests) if profile else "",
        )
        tracks = st.multiselect(
            "Coding tracks",
            options=list(CODING_TRACKS),
            default=list(profile.coding_tracks) if profile else [],
            format_func=lambda t: CODING_TRACKS[t],
        )
        submitted = st.form_submit_button("Save profile", type="primary")

    if submitted:
        interests = []
        for item in interests_raw.split(","):
            item = item.strip()
            if item and item not in interests:
                interests.append(item)
        changes = {
            "bio": bio.strip(),
            "college": college.strip(),
            "course": course.strip(),
            "year": year,
            "interests": interests,
            "coding_track": join_coding_tracks(tracks),
        }
        try:
            result = controller.update_profile({"profile": changes})
        except auth.AuthError as e:
            st.error(f"Failed to update profile: {e}")
            return
        if result.signed_out:
            st.rerun()
        st.success("Profile updated successfully!")


def render_profile(controller: AuthController):
    user = controller.user
    if user is None:
        return

    if st.session_state.get("show_onboarding"):
        _render_onboarding(controller, user)

    c_pic, c_info = st.columns([1, 5])
    if user.picture:
        c_pic.image(user.picture, width=80)
    c_info.subheader(user.name or user.email)
    c_info.caption(f"{user.email} · {'✅ verified' if user.verified_email else 'unverified'} · logins: {user.login_count}")
    if user.profile and user.profile.coding_tracks:
        c_info.write(" · ".join(CODING_TRACKS[t] for t in user.profile.coding_tracks))

    if st.button("🔄 Refresh profile"):
        result = controller.refresh_profile()
        if result.signed_out:
            st.rerun()
        elif not result.success:
            st.warning(f"Could not refresh profile: {result.error}")

    if rbac_policy.enforce(user, "EDIT_PROFILE"):
        _render_profile_form(controller, user)

    if rbac_policy.enforce(user, "DELETE_ACCOUNT"):
        with st.expander("⚠️ Danger zone", expanded=False):
            confirm = st.checkbox("I understand this permanently deletes my account")
            if st.button("Delete account", disabled=not confirm):
                try:
                    controller.delete_account()
                except auth.AuthError as e:
                    st.error(f"Failed to delete account: {e}")
                else:
                    session_manager.logout()
