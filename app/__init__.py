"""Notification service application package.

Layers live in ``domain`` (entities, errors, collaborator contracts),
``application`` (the notification engine), ``infrastructure`` (stores and the
realtime channel) and ``interfaces`` (HTTP and websocket surfaces).
"""
