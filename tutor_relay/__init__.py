"""Realtime tutor relay: a WebSocket bridge between tutor clients and a realtime model backend."""
