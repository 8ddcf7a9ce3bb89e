"""HTTP surface for preview sessions."""
