"""Typed per-platform accessors over a :class:`NotificationSettingsManager`."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from ..icons import NotificationIconType
from .catalog import AndroidKeys, IOSKeys
from .manager import NotificationSettingsManager
from .model import AndroidExactSchedulingOption, AuthorizationOption, PresentationOption


class _PlatformSettings:
    def __init__(self, manager: NotificationSettingsManager):
        self.manager = manager


class AndroidSettings(_PlatformSettings):
    @property
    def reschedule_on_device_restart(self) -> bool:
        """Reschedule all non-expired notifications when the device restarts."""
        return self.manager.get(AndroidKeys.RESCHEDULE_ON_RESTART)

    @reschedule_on_device_restart.setter
    def reschedule_on_device_restart(self, value: bool) -> None:
        self.manager.set(AndroidKeys.RESCHEDULE_ON_RESTART, value)

    @property
    def custom_activity_string(self) -> str:
        """Full class name of the activity assigned to notifications."""
        return self.manager.get(AndroidKeys.CUSTOM_ACTIVITY_CLASS)

    @custom_activity_string.setter
    def custom_activity_string(self, value: str) -> None:
        self.manager.set(AndroidKeys.CUSTOM_ACTIVITY_CLASS, value)

    @property
    def exact_scheduling_option(self) -> AndroidExactSchedulingOption:
        return self.manager.get(AndroidKeys.EXACT_ALARM)

    @exact_scheduling_option.setter
    def exact_scheduling_option(self, value: AndroidExactSchedulingOption) -> None:
        self.manager.set(AndroidKeys.EXACT_ALARM, int(value))

    def add_drawable_resource(
        self, id: str, image: Optional[Union[str, Path]], type: NotificationIconType
    ) -> None:
        self.manager.add_drawable_resource(id, image, type)

    def remove_drawable_resource(self, index_or_id: Union[int, str]) -> None:
        if isinstance(index_or_id, int):
            self.manager.remove_drawable_resource_by_index(index_or_id)
        else:
            self.manager.remove_drawable_resource_by_id(index_or_id)

    def clear_drawable_resources(self) -> None:
        self.manager.clear_drawable_resources()


class IOSSettings(_PlatformSettings):
    @property
    def request_authorization_on_app_launch(self) -> bool:
        return self.manager.get(IOSKeys.REQUEST_AUTHORIZATION_ON_APP_LAUNCH)

    @request_authorization_on_app_launch.setter
    def request_authorization_on_app_launch(self, value: bool) -> None:
        self.manager.set(IOSKeys.REQUEST_AUTHORIZATION_ON_APP_LAUNCH, value)

    @property
    def default_authorization_options(self) -> AuthorizationOption:
        return self.manager.get(IOSKeys.DEFAULT_AUTHORIZATION_OPTIONS)

    @default_authorization_options.setter
    def default_authorization_options(self, value: AuthorizationOption) -> None:
        self.manager.set(IOSKeys.DEFAULT_AUTHORIZATION_OPTIONS, int(value))

    @property
    def add_remote_notification_capability(self) -> bool:
        return self.manager.get(IOSKeys.ADD_PUSH_CAPABILITY)

    @add_remote_notification_capability.setter
    def add_remote_notification_capability(self, value: bool) -> None:
        self.manager.set(IOSKeys.ADD_PUSH_CAPABILITY, value)

    @property
    def request_push_authorization_on_app_launch(self) -> bool:
        return self.manager.get(IOSKeys.REQUEST_PUSH_AUTHORIZATION_ON_LAUNCH)

    @request_push_authorization_on_app_launch.setter
    def request_push_authorization_on_app_launch(self, value: bool) -> None:
        self.manager.set(IOSKeys.REQUEST_PUSH_AUTHORIZATION_ON_LAUNCH, value)

    @property
    def remote_notification_foreground_presentation_options(self) -> PresentationOption:
        return self.manager.get(IOSKeys.REMOTE_NOTIFICATION_FOREGROUND_PRESENTATION_OPTIONS)

    @remote_notification_foreground_presentation_options.setter
    def remote_notification_foreground_presentation_options(self, value: PresentationOption) -> None:
        self.manager.set(IOSKeys.REMOTE_NOTIFICATION_FOREGROUND_PRESENTATION_OPTIONS, int(value))

    @property
    def use_aps_release_environment(self) -> bool:
        return self.manager.get(IOSKeys.USE_APS_RELEASE)

    @use_aps_release_environment.setter
    def use_aps_release_environment(self, value: bool) -> None:
        self.manager.set(IOSKeys.USE_APS_RELEASE, value)

    @property
    def use_location_notification_trigger(self) -> bool:
        return self.manager.get(IOSKeys.USE_LOCATION_TRIGGER)

    @use_location_notification_trigger.setter
    def use_location_notification_trigger(self, value: bool) -> None:
        self.manager.set(IOSKeys.USE_LOCATION_TRIGGER, value)
