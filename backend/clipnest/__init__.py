"""Clipnest: video sharing API."""
