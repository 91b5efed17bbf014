"""Channel Dashboard Page."""

import streamlit as st
import pandas as pd

from components import queries
from components.guard import require_login

st.set_page_config(page_title="Dashboard", page_icon="📊", layout="wide")

api_client = require_login()

st.title("📊 Channel Dashboard")

success, stats = queries.channel_stats(api_client, queries.token())
if not success:
    st.error(stats)
    st.stop()

col1, col2, col3 = st.columns(3)
col1.metric("Videos", stats["totalVideos"])
col2.metric("Views", stats["totalViews"])
col3.metric("Subscribers", stats["totalSubscribers"])

col4, col5, col6 = st.columns(3)
col4.metric("Video likes", stats["totalLikes"])
col5.metric("Comments", stats["totalComments"])
col6.metric("Tweets", stats["totalTweets"])

st.markdown("---")
st.subheader("Your videos")

success, videos = queries.channel_videos(api_client, queries.token())
if not success:
    st.error(videos)
    st.stop()

if not videos:
    st.info("You haven't uploaded anything yet.")
    if st.button("⬆️ Upload a video"):
        st.switch_page("pages/02_upload.py")
    st.stop()

df = pd.DataFrame([
    {
        "Title": v["title"],
        "Published": "✅" if v["isPublished"] else "⏸️",
        "Views": v["views"],
        "Likes": v["likes"],
        "Duration (s)": round(v.get("duration") or 0, 1),
        "Uploaded": pd.to_datetime(v["createdAt"]).strftime("%Y-%m-%d"),
    }
    for v in videos
])
st.dataframe(df, use_container_width=True, hide_index=True)

if len(df) > 1:
    st.bar_chart(df.set_index("Title")["Views"])

st.subheader("Quick actions")
for video in videos:
    col_a, col_b, col_c = st.columns([4, 1, 1])
    with col_a:
        st.write(video["title"])
    with col_b:
        label = "Unpublish" if video["isPublished"] else "Publish"
        if st.button(label, key=f"publish_{video['id']}"):
            ok, result = queries.toggle_publish(api_client, video["id"])
            if ok:
                st.rerun()
            else:
                st.error(result)
    with col_c:
        if st.button("Open", key=f"open_{video['id']}"):
            st.session_state.current_video_id = video["id"]
            st.switch_page("pages/01_videos.py")
