#!/usr/bin/env python3
"""Convenience entry point.

Equivalent to ``python -m notification_settings_tool.cli`` or the installed
``notification-settings`` command.
"""

from notification_settings_tool.cli import main as _main


if __name__ == "__main__":
    raise SystemExit(_main())
