"""Contact-form relay: validates website submissions and forwards them by email."""
