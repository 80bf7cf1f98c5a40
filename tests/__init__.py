"""Test suite for the realtime tutor relay.

Unit tests live under ``unit/`` grouped by area; shared fakes (client and
upstream sockets, tool executors) and the relay harness live in ``helpers/``.
"""
