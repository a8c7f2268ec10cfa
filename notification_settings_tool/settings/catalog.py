"""Known notification settings per platform.

Labels, tooltips and defaults are fixed here; only values are persisted.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List

from .model import (
    AndroidExactSchedulingOption,
    AuthorizationOption,
    Platform,
    PresentationOption,
    Setting,
    SettingValue,
    flatten_settings,
)


class AndroidKeys:
    RESCHEDULE_ON_RESTART = "UnityNotificationAndroidRescheduleOnDeviceRestart"
    EXACT_ALARM = "UnityNotificationAndroidScheduleExactAlarms"
    CUSTOM_ACTIVITY_CLASS = "UnityNotificationAndroidCustomActivityString"


class IOSKeys:
    REQUEST_AUTHORIZATION_ON_APP_LAUNCH = "UnityNotificationRequestAuthorizationOnAppLaunch"
    DEFAULT_AUTHORIZATION_OPTIONS = "UnityNotificationDefaultAuthorizationOptions"
    ADD_PUSH_CAPABILITY = "UnityAddRemoteNotificationCapability"
    REQUEST_PUSH_AUTHORIZATION_ON_LAUNCH = "UnityNotificationRequestAuthorizationForRemoteNotificationsOnAppLaunch"
    REMOTE_NOTIFICATION_FOREGROUND_PRESENTATION_OPTIONS = "UnityRemoteNotificationForegroundPresentationOptions"
    USE_APS_RELEASE = "UnityUseAPSReleaseEnvironment"
    USE_LOCATION_TRIGGER = "UnityUseLocationNotificationTrigger"


DEFAULT_CUSTOM_ACTIVITY = "com.unity3d.player.UnityPlayerActivity"

# (key, default) -> value actually used; lets the manager seed/validate
# against the persisted mapping while the tree is being built.
ValueResolver = Callable[[str, SettingValue], SettingValue]

_DEFAULT_ALERT_BADGE_SOUND = 7


def android_settings(resolve: ValueResolver) -> List[Setting]:
    return [
        Setting(
            AndroidKeys.RESCHEDULE_ON_RESTART,
            "Reschedule on Device Restart",
            "Enable this to automatically reschedule all non-expired notifications after device restart. "
            "By default all scheduled notifications are removed after restarting.",
            resolve(AndroidKeys.RESCHEDULE_ON_RESTART, SettingValue.of_bool(False)),
        ),
        Setting(
            AndroidKeys.EXACT_ALARM,
            "Schedule at exact time",
            "Whether notifications should appear at exact time or approximate",
            resolve(AndroidKeys.EXACT_ALARM, SettingValue.of_enum(AndroidExactSchedulingOption(0))),
        ),
        Setting(
            AndroidKeys.CUSTOM_ACTIVITY_CLASS,
            "Custom Activity Name",
            "The full class name of the activity which will be assigned to the notification.",
            resolve(AndroidKeys.CUSTOM_ACTIVITY_CLASS, SettingValue.of_string(DEFAULT_CUSTOM_ACTIVITY)),
        ),
    ]


def ios_settings(resolve: ValueResolver) -> List[Setting]:
    return [
        Setting(
            IOSKeys.REQUEST_AUTHORIZATION_ON_APP_LAUNCH,
            "Request Authorization on App Launch",
            "Request permission to send notifications as soon as the app launches.",
            resolve(IOSKeys.REQUEST_AUTHORIZATION_ON_APP_LAUNCH, SettingValue.of_bool(True)),
            dependencies=[
                Setting(
                    IOSKeys.DEFAULT_AUTHORIZATION_OPTIONS,
                    "Default Notification Authorization Options",
                    "Interaction types the app requests permission for on launch.",
                    resolve(
                        IOSKeys.DEFAULT_AUTHORIZATION_OPTIONS,
                        SettingValue.of_enum(AuthorizationOption(_DEFAULT_ALERT_BADGE_SOUND)),
                    ),
                ),
            ],
        ),
        Setting(
            IOSKeys.ADD_PUSH_CAPABILITY,
            "Enable Push Notifications",
            "Add the push notification capability and the remote-notification background mode to the Xcode project.",
            resolve(IOSKeys.ADD_PUSH_CAPABILITY, SettingValue.of_bool(False)),
            dependencies=[
                Setting(
                    IOSKeys.REQUEST_PUSH_AUTHORIZATION_ON_LAUNCH,
                    "Register for Push Notifications on App Launch",
                    "Register for remote notifications and retrieve the device token on launch.",
                    resolve(IOSKeys.REQUEST_PUSH_AUTHORIZATION_ON_LAUNCH, SettingValue.of_bool(False)),
                ),
                Setting(
                    IOSKeys.REMOTE_NOTIFICATION_FOREGROUND_PRESENTATION_OPTIONS,
                    "Remote Notification Foreground Presentation Options",
                    "How remote notifications are presented while the app is in the foreground.",
                    resolve(
                        IOSKeys.REMOTE_NOTIFICATION_FOREGROUND_PRESENTATION_OPTIONS,
                        SettingValue.of_enum(PresentationOption(_DEFAULT_ALERT_BADGE_SOUND)),
                    ),
                ),
                Setting(
                    IOSKeys.USE_APS_RELEASE,
                    "Enable Release Environment for APS",
                    "Register remote notifications against the production APS environment instead of the sandbox.",
                    resolve(IOSKeys.USE_APS_RELEASE, SettingValue.of_bool(False)),
                ),
            ],
        ),
        Setting(
            IOSKeys.USE_LOCATION_TRIGGER,
            "Include CoreLocation framework",
            "Link CoreLocation and enable location based notification triggers.",
            resolve(IOSKeys.USE_LOCATION_TRIGGER, SettingValue.of_bool(False)),
        ),
    ]


CATALOGS = {
    Platform.ANDROID: android_settings,
    Platform.IOS: ios_settings,
}


def default_values(platform: Platform) -> Dict[str, Any]:
    """Raw default mapping for *platform* (as it would be persisted)."""
    tree = CATALOGS[platform](lambda _key, default: default)
    return {s.key: s.value.to_raw() for s in flatten_settings(tree)}
