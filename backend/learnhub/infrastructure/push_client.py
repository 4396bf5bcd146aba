"""FCM Push Client — multicast delivery through the Firebase Admin SDK.

Invariants:
    - Implements PushSender (core/service_protocols.py)
    - One multicast call per send_to_tokens; per-token outcomes returned in input order
    - UnregisteredError on a token is reported as error_code "unregistered"
    - Transport-level failures raise PushDeliveryError (never FirebaseError)

Design Decisions:
    - Firebase app initialized lazily under a dedicated app name: importing this module
      never touches credentials, and a second initialize_app() is never attempted
    - SDK calls are blocking HTTP: run in a worker thread via asyncio.to_thread
    - Credentials from a service-account file, else from discrete env fields
"""

import asyncio
import logging

import firebase_admin
from firebase_admin import credentials, messaging
from firebase_admin.exceptions import FirebaseError

from learnhub.config import Settings
from learnhub.core.errors import PushDeliveryError
from learnhub.core.push_rules import UNREGISTERED_ERROR_CODE
from learnhub.core.service_protocols import PushResponse, PushResult

logger = logging.getLogger(__name__)

_APP_NAME = "learnhub-push"
_TOKEN_URI = "https://oauth2.googleapis.com/token"


def _build_credentials(settings: Settings) -> credentials.Certificate:
    if settings.firebase_credentials_file:
        return credentials.Certificate(settings.firebase_credentials_file)
    if not (
        settings.firebase_project_id
        and settings.firebase_client_email
        and settings.firebase_private_key
    ):
        raise PushDeliveryError("Firebase credentials are not configured")
    return credentials.Certificate({
        "type": "service_account",
        "project_id": settings.firebase_project_id,
        "client_email": settings.firebase_client_email,
        "private_key": settings.firebase_private_key.replace("\\n", "\n"),
        "token_uri": _TOKEN_URI,
    })


class FirebasePushSender:
    """PushSender backed by firebase_admin.messaging."""

    def __init__(self, settings: Settings):
        self._settings = settings
        self._app: firebase_admin.App | None = None

    def _get_app(self) -> firebase_admin.App:
        if self._app is not None:
            return self._app
        try:
            self._app = firebase_admin.get_app(_APP_NAME)
        except ValueError:
            try:
                cred = _build_credentials(self._settings)
            except (ValueError, OSError) as e:
                raise PushDeliveryError(f"invalid Firebase credentials: {e}")
            options = None
            if self._settings.firebase_project_id:
                options = {"projectId": self._settings.firebase_project_id}
            self._app = firebase_admin.initialize_app(cred, options, name=_APP_NAME)
            logger.info("Firebase app initialized for push delivery")
        return self._app

    async def send_to_tokens(
        self,
        tokens: list[str],
        title: str,
        body: str,
        data: dict[str, str] | None = None,
        image_url: str | None = None,
    ) -> PushResult:
        if not tokens:
            return PushResult(success_count=0, failure_count=0)
        app = self._get_app()
        message = messaging.MulticastMessage(
            tokens=tokens,
            notification=messaging.Notification(title=title, body=body, image=image_url),
            data=data or {},
            android=messaging.AndroidConfig(priority="high"),
        )
        try:
            batch = await asyncio.to_thread(
                messaging.send_each_for_multicast, message, app=app,
            )
        except (FirebaseError, ValueError) as e:
            logger.error(
                f"FCM multicast failed: {e}",
                extra={"token_count": len(tokens)},
            )
            raise PushDeliveryError(str(e))

        responses = [
            PushResponse(
                token=token,
                success=resp.success,
                message_id=resp.message_id,
                error_code=_error_code(resp.exception),
            )
            for token, resp in zip(tokens, batch.responses)
        ]
        logger.info(
            f"FCM multicast: {batch.success_count} ok, {batch.failure_count} failed",
            extra={"token_count": len(tokens)},
        )
        return PushResult(
            success_count=batch.success_count,
            failure_count=batch.failure_count,
            responses=responses,
        )


def _error_code(exc: Exception | None) -> str | None:
    if exc is None:
        return None
    if isinstance(exc, messaging.UnregisteredError):
        return UNREGISTERED_ERROR_CODE
    if isinstance(exc, FirebaseError):
        return str(exc.code).lower()
    return type(exc).__name__
