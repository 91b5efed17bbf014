"""Video Player Page."""

import streamlit as st

from components import queries
from components.guard import require_login

st.set_page_config(page_title="Watch", page_icon="▶️", layout="wide")

api_client = require_login()

video_id = st.session_state.get("current_video_id")
if not video_id:
    st.info("Pick a video on the home page first.")
    if st.button("🏠 Home"):
        st.switch_page("streamlit_app.py")
    st.stop()

success, video = api_client.get_video(video_id)
if not success:
    st.error(video)
    st.stop()

# Count one view per video per session
viewed = st.session_state.setdefault("viewed_videos", set())
if video_id not in viewed:
    ok, updated = api_client.add_view(video_id)
    if ok:
        video["views"] = updated["views"]
    viewed.add(video_id)

st.video(video["videoFile"])
st.title(video["title"])

owner = video.get("owner") or {}
col1, col2, col3, col4 = st.columns([3, 1, 1, 1])

with col1:
    st.caption(f"{video['views']} views · uploaded {video['createdAt'][:10]}")
    if owner and st.button(f"📺 {owner.get('fullName', owner.get('username'))}"):
        st.session_state.channel_username = owner["username"]
        st.switch_page("pages/04_channel.py")

with col2:
    label = "💔 Unlike" if video.get("isLiked") else "❤️ Like"
    if st.button(f"{label} ({video['likes']})", use_container_width=True):
        ok, result = queries.toggle_like(api_client, "v", video_id)
        if ok:
            st.rerun()
        else:
            st.error(result)

is_owner = owner.get("id") == st.session_state.user["id"]

with col3:
    if is_owner:
        publish_label = "🙈 Unpublish" if video["isPublished"] else "📢 Publish"
        if st.button(publish_label, use_container_width=True):
            ok, result = queries.toggle_publish(api_client, video_id)
            if ok:
                st.rerun()
            else:
                st.error(result)

with col4:
    if is_owner and st.button("🗑️ Delete", use_container_width=True):
        ok, result = queries.delete_video(api_client, video_id)
        if ok:
            st.session_state.pop("current_video_id", None)
            st.switch_page("streamlit_app.py")
        else:
            st.error(result)

if video.get("description"):
    st.markdown(video["description"])

if is_owner:
    with st.expander("✏️ Edit details"):
        with st.form("edit_video"):
            title = st.text_input("Title", value=video["title"])
            description = st.text_area("Description", value=video.get("description") or "")
            thumbnail = st.file_uploader("New thumbnail", type=["png", "jpg", "jpeg", "webp"])
            if st.form_submit_button("Save"):
                ok, result = queries.update_video(
                    api_client,
                    video_id,
                    title=title,
                    description=description,
                    thumbnail=(thumbnail.name, thumbnail.getvalue(), thumbnail.type) if thumbnail else None
                )
                if ok:
                    st.success("Video updated")
                    st.rerun()
                else:
                    st.error(result)

st.markdown("---")
st.subheader("💬 Comments")

with st.form("add_comment", clear_on_submit=True):
    content = st.text_area("Add a comment", label_visibility="collapsed", placeholder="Add a comment...")
    if st.form_submit_button("Comment"):
        if not content.strip():
            st.error("Comment cannot be empty")
        else:
            ok, result = queries.add_comment(api_client, video_id, content)
            if ok:
                st.rerun()
            else:
                st.error(result)

page_number = st.session_state.get("comment_page", 1)
success, page = queries.comments(api_client, queries.token(), video_id, page=page_number)

if not success:
    st.error(page)
elif not page["items"]:
    st.caption("No comments yet.")
else:
    for comment in page["items"]:
        author = comment.get("owner") or {}
        with st.container():
            col1, col2, col3 = st.columns([6, 1, 1])
            with col1:
                st.markdown(f"**{author.get('username', '')}** · {comment['createdAt'][:10]}")
                st.write(comment["content"])
            with col2:
                heart = "💔" if comment["isLiked"] else "❤️"
                if st.button(f"{heart} {comment['likes']}", key=f"like_{comment['id']}"):
                    queries.toggle_like(api_client, "c", comment["id"])
                    st.rerun()
            with col3:
                if author.get("id") == st.session_state.user["id"]:
                    if st.button("🗑️", key=f"delete_{comment['id']}"):
                        queries.delete_comment(api_client, comment["id"])
                        st.rerun()

    if page["totalPages"] > 1:
        new_page = st.number_input("Page", min_value=1, max_value=page["totalPages"], value=page_number)
        if new_page != page_number:
            st.session_state.comment_page = new_page
            st.rerun()
