"""OAuth credentials and encrypted token storage."""
