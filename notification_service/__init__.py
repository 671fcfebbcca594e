"""Notification fan-out service.

Consumes notification events published by the task and team services,
persists one record per target user and pushes it to the user's live
websocket connections.
"""
