"""Video Upload Page."""

import streamlit as st

from components import queries
from components.guard import require_login

st.set_page_config(page_title="Upload", page_icon="⬆️", layout="wide")

api_client = require_login()

st.title("⬆️ Upload a Video")

with st.form("upload_form", clear_on_submit=True):
    title = st.text_input("Title", max_chars=255)
    description = st.text_area("Description")
    video_file = st.file_uploader("Video file", type=["mp4", "mov", "webm", "mkv"])
    thumbnail = st.file_uploader("Thumbnail", type=["png", "jpg", "jpeg", "webp"])

    submitted = st.form_submit_button("Publish", use_container_width=True)

if submitted:
    if not title.strip():
        st.error("Title is required")
    elif video_file is None or thumbnail is None:
        st.error("Both a video file and a thumbnail are required")
    else:
        with st.spinner("Uploading... large videos can take a while"):
            success, result = queries.publish_video(
                api_client,
                title,
                description,
                (video_file.name, video_file.getvalue(), video_file.type),
                (thumbnail.name, thumbnail.getvalue(), thumbnail.type)
            )

        if success:
            st.success(f"✅ Published \"{result['title']}\"")
            st.session_state.current_video_id = result["id"]
            if st.button("▶️ Watch it"):
                st.switch_page("pages/01_videos.py")
        else:
            st.error(f"Upload failed: {result}")
