"""Page access control for the Streamlit app."""

import streamlit as st

from components.api_client import APIClient


def get_client() -> APIClient:
    """Shared client stored in session state."""
    if "api_client" not in st.session_state:
        st.session_state.api_client = APIClient()
    return st.session_state.api_client


def is_logged_in() -> bool:
    return "token" in st.session_state and "user" in st.session_state


def require_login() -> APIClient:
    """
    Stop rendering the current page unless a user is signed in.

    Returns:
        The session's APIClient
    """
    client = get_client()
    if not is_logged_in():
        st.error("⚠️ Please login first")
        if st.button("Go to login"):
            st.switch_page("streamlit_app.py")
        st.stop()
    return client
