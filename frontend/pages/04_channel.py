"""Channel Profile Page."""

import streamlit as st

from components import queries
from components.guard import require_login

st.set_page_config(page_title="Channel", page_icon="📺", layout="wide")

api_client = require_login()
me = st.session_state.user

username = st.text_input("Channel", value=st.session_state.get("channel_username", me["username"]))
st.session_state.channel_username = username

success, profile = queries.channel(api_client, queries.token(), username)
if not success:
    st.error(profile)
    st.stop()

if profile.get("coverImage"):
    st.image(profile["coverImage"], use_container_width=True)

col1, col2, col3 = st.columns([1, 4, 1])

with col1:
    st.image(profile["avatar"], width=96)

with col2:
    st.title(profile["fullName"])
    st.caption(
        f"@{profile['username']} · {profile['subscribersCount']} subscribers · "
        f"{profile['channelsSubscribedToCount']} subscribed"
    )

with col3:
    if profile["id"] != me["id"]:
        label = "🔕 Unsubscribe" if profile["isSubscribed"] else "🔔 Subscribe"
        if st.button(label, use_container_width=True):
            ok, result = queries.toggle_subscription(api_client, profile["id"])
            if ok:
                st.rerun()
            else:
                st.error(result)

tab1, tab2, tab3, tab4 = st.tabs(["🎬 Videos", "🐦 Tweets", "📚 Subscriptions", "👥 Subscribers"])

with tab1:
    ok, page = queries.videos(api_client, queries.token(), user_id=profile["id"], limit=24)
    if not ok:
        st.error(page)
    elif not page["items"]:
        st.info("This channel has no videos yet.")
    else:
        columns = st.columns(3)
        for index, video in enumerate(page["items"]):
            with columns[index % 3]:
                st.image(video["thumbnail"], use_container_width=True)
                st.markdown(f"**{video['title']}**")
                st.caption(f"{video['views']} views")
                if st.button("▶️ Watch", key=f"watch_{video['id']}"):
                    st.session_state.current_video_id = video["id"]
                    st.switch_page("pages/01_videos.py")

with tab2:
    ok, tweets = queries.user_tweets(api_client, queries.token(), profile["id"])
    if not ok:
        st.error(tweets)
    elif not tweets:
        st.info("No tweets yet.")
    else:
        for tweet in tweets:
            st.write(tweet["content"])
            st.caption(f"❤️ {tweet['likes']} · {tweet['createdAt'][:10]}")
            st.divider()

with tab3:
    ok, channels = queries.subscribed_channels(api_client, queries.token(), profile["id"])
    if not ok:
        st.error(channels)
    elif not channels:
        st.info("Not subscribed to any channel.")
    else:
        for entry in channels:
            col_a, col_b = st.columns([5, 1])
            with col_a:
                st.markdown(f"**{entry['fullName']}** @{entry['username']} · {entry['subscribersCount']} subscribers")
            with col_b:
                if st.button("Open", key=f"open_{entry['id']}"):
                    st.session_state.channel_username = entry["username"]
                    st.rerun()

with tab4:
    ok, subscribers = api_client.get_subscribers(profile["id"])
    if not ok:
        st.error(subscribers)
    elif not subscribers:
        st.info("No subscribers yet.")
    else:
        for entry in subscribers:
            back = " · subscribed back" if entry["isSubscribedBack"] else ""
            st.markdown(f"**{entry['fullName']}** @{entry['username']}{back}")

if profile["id"] == me["id"]:
    st.markdown("---")
    st.subheader("📖 Library")
    history_tab, liked_tab = st.tabs(["🕘 Watch history", "❤️ Liked videos"])

    with history_tab:
        ok, history = api_client.get_watch_history()
        if not ok:
            st.error(history)
        elif not history:
            st.info("Nothing watched yet.")
        else:
            for entry in history:
                video = entry["video"]
                if st.button(f"▶️ {video['title']} · watched {entry['watchedAt'][:10]}", key=f"history_{video['id']}"):
                    st.session_state.current_video_id = video["id"]
                    st.switch_page("pages/01_videos.py")

    with liked_tab:
        ok, liked = api_client.get_liked_videos()
        if not ok:
            st.error(liked)
        elif not liked:
            st.info("No liked videos yet.")
        else:
            for entry in liked:
                video = entry["video"]
                if st.button(f"▶️ {video['title']}", key=f"liked_{entry['id']}"):
                    st.session_state.current_video_id = video["id"]
                    st.switch_page("pages/01_videos.py")

    st.markdown("---")
    with st.expander("⚙️ Account settings"):
        with st.form("account_form"):
            full_name = st.text_input("Full name", value=me["fullName"])
            email = st.text_input("Email", value=me["email"])
            if st.form_submit_button("Save details"):
                ok, result = api_client.update_account(full_name=full_name, email=email)
                if ok:
                    st.session_state.user = result
                    queries.channel.clear()
                    st.success("Account updated")
                else:
                    st.error(result)

        with st.form("password_form", clear_on_submit=True):
            old_password = st.text_input("Current password", type="password")
            new_password = st.text_input("New password", type="password")
            if st.form_submit_button("Change password"):
                ok, result = api_client.change_password(old_password, new_password)
                if ok:
                    st.success("Password changed")
                else:
                    st.error(result)

        avatar = st.file_uploader("New avatar", type=["png", "jpg", "jpeg", "webp"])
        if avatar is not None and st.button("Upload avatar"):
            ok, result = api_client.update_avatar((avatar.name, avatar.getvalue(), avatar.type))
            if ok:
                st.session_state.user = result
                queries.channel.clear()
                st.rerun()
            else:
                st.error(result)

        cover = st.file_uploader("New cover image", type=["png", "jpg", "jpeg", "webp"])
        if cover is not None and st.button("Upload cover image"):
            ok, result = api_client.update_cover_image((cover.name, cover.getvalue(), cover.type))
            if ok:
                queries.channel.clear()
                st.rerun()
            else:
                st.error(result)
