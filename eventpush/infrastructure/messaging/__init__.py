"""Push notification transport."""

from eventpush.infrastructure.messaging.fcm import FcmNotifier, build_fcm_message

__all__ = ["FcmNotifier", "build_fcm_message"]
