"""Agent gateway: streams agent turns as typed server-sent events."""
