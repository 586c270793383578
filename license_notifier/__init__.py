"""License expiry notifications for the license management dashboard."""
