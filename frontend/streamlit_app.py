"""Clipnest - Streamlit Frontend."""

import streamlit as st

from components import queries
from components.guard import get_client, is_logged_in

# Page configuration
st.set_page_config(
    page_title="Clipnest",
    page_icon="🎬",
    layout="wide",
    initial_sidebar_state="expanded"
)

api_client = get_client()


def _clear_session():
    for key in list(st.session_state.keys()):
        if key != "api_client":
            del st.session_state[key]
    queries.clear_all()


def show_login_page():
    """Display login page."""
    st.title("🎬 Clipnest")
    st.subheader("Login to Your Account")

    # Check API health
    if not api_client.health_check():
        st.error(f"⚠️ Cannot connect to backend API. Please make sure the server is running at {api_client.base_url}")
        st.info("To start the backend: `cd backend && python -m uvicorn clipnest.main:app --reload`")
        return

    col1, col2, col3 = st.columns([1, 2, 1])

    with col2:
        st.markdown("---")

        with st.form("login_form"):
            identifier = st.text_input("Username or Email", placeholder="Enter your username or email")
            password = st.text_input("Password", type="password", placeholder="Enter your password")

            col_login, col_register = st.columns(2)

            with col_login:
                submit_button = st.form_submit_button("Login", use_container_width=True)

            with col_register:
                register_button = st.form_submit_button("Create Account", use_container_width=True)

            if submit_button:
                if not identifier or not password:
                    st.error("Please enter both username and password")
                else:
                    with st.spinner("Logging in..."):
                        success, result = api_client.login(identifier, password)

                    if success:
                        st.session_state.token = result["accessToken"]
                        st.session_state.refresh_token = result["refreshToken"]
                        st.session_state.user = result["user"]
                        queries.clear_all()
                        st.rerun()
                    else:
                        st.error(f"Login failed: {result}")

            if register_button:
                st.session_state.show_register = True
                st.rerun()


def show_register_page():
    """Display registration page."""
    st.title("📝 Create Your Channel")

    col1, col2, col3 = st.columns([1, 2, 1])

    with col2:
        st.markdown("---")

        with st.form("register_form"):
            full_name = st.text_input("Full Name", placeholder="Your display name")
            email = st.text_input("Email", placeholder="your.email@example.com")
            username = st.text_input("Username", placeholder="Choose a username (3-50 characters)")
            password = st.text_input("Password", type="password", placeholder="Create a password")
            password_confirm = st.text_input("Confirm Password", type="password", placeholder="Re-enter your password")
            avatar = st.file_uploader("Avatar", type=["png", "jpg", "jpeg", "webp"])
            cover_image = st.file_uploader("Cover Image (Optional)", type=["png", "jpg", "jpeg", "webp"])

            st.info("""
            **Password Requirements:**
            - 8 to 72 characters
            - At least one letter and one digit
            """)

            col_submit, col_back = st.columns(2)

            with col_submit:
                submit_button = st.form_submit_button("Register", use_container_width=True)

            with col_back:
                back_button = st.form_submit_button("Back to Login", use_container_width=True)

            if submit_button:
                if not all([full_name, email, username, password, password_confirm]):
                    st.error("Please fill in all required fields")
                elif password != password_confirm:
                    st.error("Passwords do not match")
                elif avatar is None:
                    st.error("Please choose an avatar image")
                else:
                    with st.spinner("Creating account..."):
                        success, result = api_client.register(
                            full_name=full_name,
                            email=email,
                            username=username,
                            password=password,
                            avatar=(avatar.name, avatar.getvalue(), avatar.type),
                            cover_image=(cover_image.name, cover_image.getvalue(), cover_image.type) if cover_image else None
                        )

                    if success:
                        st.success(f"Account created! Please log in, {result['username']}.")
                        st.session_state.show_register = False
                    else:
                        st.error(f"Registration failed: {result}")

            if back_button:
                st.session_state.show_register = False
                st.rerun()


def show_main_app():
    """Display the home feed after login."""
    user = st.session_state.user

    with st.sidebar:
        st.title("🎬 Clipnest")
        if user.get("avatar"):
            st.image(user["avatar"], width=64)
        st.write(f"👤 **{user['username']}**")
        st.write(f"📧 {user['email']}")

        st.markdown("---")

        if st.button("🚪 Logout", use_container_width=True):
            api_client.logout()
            _clear_session()
            st.rerun()

    st.title(f"Welcome back, {user['fullName']}! 🎉")

    search = st.text_input("🔍 Search videos", placeholder="Search by title")
    success, page = queries.videos(api_client, queries.token(), page=1, limit=12, query=search or None)

    if not success:
        st.error(page)
        return

    if not page["items"]:
        st.info("No videos yet. Be the first to upload one!")
        return

    columns = st.columns(3)
    for index, video in enumerate(page["items"]):
        with columns[index % 3]:
            st.image(video["thumbnail"], use_container_width=True)
            st.markdown(f"**{video['title']}**")
            owner = video.get("owner") or {}
            st.caption(f"{owner.get('username', '')} · {video['views']} views · {video['likes']} likes")
            if st.button("▶️ Watch", key=f"watch_{video['id']}"):
                st.session_state.current_video_id = video["id"]
                st.switch_page("pages/01_videos.py")


def main():
    """Main application entry point."""
    if "show_register" not in st.session_state:
        st.session_state.show_register = False

    if is_logged_in():
        # Verify token is still valid, trying one refresh before giving up
        success, user = api_client.get_current_user()
        if not success:
            refreshed, _ = api_client.refresh()
            success, user = api_client.get_current_user() if refreshed else (False, None)

        if success:
            st.session_state.user = user
            show_main_app()
        else:
            _clear_session()
            st.rerun()
    elif st.session_state.show_register:
        show_register_page()
    else:
        show_login_page()


if __name__ == "__main__":
    main()
