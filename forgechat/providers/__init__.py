"""External providers consumed by the chat core."""
