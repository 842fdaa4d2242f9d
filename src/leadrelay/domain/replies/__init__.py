"""Acknowledgment reply composition."""

from .templates import build_acknowledgment, render_reply_html, render_reply_text

__all__ = ["build_acknowledgment", "render_reply_html", "render_reply_text"]
