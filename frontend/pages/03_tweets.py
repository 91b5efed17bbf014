"""Tweets Page."""

import streamlit as st

from components import queries
from components.guard import require_login

st.set_page_config(page_title="Tweets", page_icon="🐦", layout="wide")

api_client = require_login()
me = st.session_state.user

st.title("🐦 Tweets")

with st.form("new_tweet", clear_on_submit=True):
    content = st.text_area("What's happening?", max_chars=500)
    if st.form_submit_button("Tweet"):
        if not content.strip():
            st.error("Tweet cannot be empty")
        else:
            success, result = queries.create_tweet(api_client, content)
            if success:
                st.rerun()
            else:
                st.error(result)

st.markdown("---")

tab1, tab2 = st.tabs(["🌍 Everyone", "🙋 Mine"])


def render_tweet(tweet: dict, prefix: str):
    author = tweet.get("owner") or {}
    col1, col2, col3 = st.columns([6, 1, 1])

    with col1:
        st.markdown(f"**{author.get('fullName', '')}** @{author.get('username', '')} · {tweet['createdAt'][:16].replace('T', ' ')}")
        st.write(tweet["content"])

    with col2:
        heart = "💔" if tweet.get("isLiked") else "❤️"
        if st.button(f"{heart} {tweet['likes']}", key=f"{prefix}_like_{tweet['id']}"):
            success, result = queries.toggle_like(api_client, "t", tweet["id"])
            if success:
                st.rerun()
            else:
                st.error(result)

    with col3:
        if author.get("id") == me["id"]:
            if st.button("🗑️", key=f"{prefix}_delete_{tweet['id']}"):
                success, result = queries.delete_tweet(api_client, tweet["id"])
                if success:
                    st.rerun()
                else:
                    st.error(result)

    st.divider()


with tab1:
    success, page = queries.tweets(api_client, queries.token())
    if not success:
        st.error(page)
    elif not page["items"]:
        st.info("No tweets yet.")
    else:
        for tweet in page["items"]:
            render_tweet(tweet, "all")

with tab2:
    success, mine = queries.user_tweets(api_client, queries.token(), me["id"])
    if not success:
        st.error(mine)
    elif not mine:
        st.info("You haven't tweeted yet.")
    else:
        for tweet in mine:
            render_tweet(tweet, "mine")
