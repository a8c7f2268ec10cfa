"""Notification Settings Tool.

Manages mobile notification settings for a game project and patches the
native Android/iOS projects the engine exports.
"""

__version__ = "1.0.0"
