"""
Data models for the Session Gateway Service.

Contains the identity and file-handling types shared by the middleware,
the storage proxy and the routers.
"""
