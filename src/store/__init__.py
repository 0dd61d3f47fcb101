"""Storage and authorization layer.

This module persists versioned content records and their allow-lists.
It powers upload, read, update, and access control for the SDK.
"""
