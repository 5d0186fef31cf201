"""
Ban notifications - Telling users about their own ban state changes.

Two behaviours, wired onto an EventBus by BanNotificationDispatcher:

- ban: an email is sent immediately and directly to the banned account.
  The subscription pipeline skips banned recipients, so this message
  cannot go through it.
- unban: handled by the subscription pipeline. The dispatcher adds the
  unbanned account to the subscriber set and supplies the notification
  content, but only for the notification addressed to that account.

SubscriptionNotifier is the pipeline itself: it computes subscribers
through the "get:subscribers" hook, lets "prepare:notification:<action>"
hooks fill in content, and delivers to every recipient who is not
banned.
"""

import logging
from dataclasses import dataclass, field

from .exceptions import NotFound
from .hooks import EventBus, HookChain, UrlBuilder
from .messages import translate
from .ports import Account, AccountRepository, NotificationTransport

logger = logging.getLogger(__name__)

SUBSCRIBERS_HOOK = "get:subscribers"


def prepare_hook(action: str) -> str:
    return f"prepare:notification:{action}"


@dataclass(frozen=True)
class Site:
    """Site identity used in notification text."""

    name: str
    url: str


@dataclass(frozen=True)
class NotificationEvent:
    """An action performed on an account that subscribers may hear about."""

    action: str
    obj: Account


@dataclass
class Notification:
    """One message for one recipient."""

    subject: str
    body: str
    recipient_guid: int
    action: str
    object_guid: int
    url: str = ""
    language: str = "en"


@dataclass
class SubscriptionNotifier:
    """Deferred notification pipeline for account events."""

    accounts: AccountRepository
    notifier: NotificationTransport
    hooks: HookChain
    site: Site

    def process(self, event: NotificationEvent) -> list[Notification]:
        """
        Compose and deliver notifications for event.

        Returns:
            One notification per recipient reached on at least one channel
        """
        subscribers: dict[int, list[str]] = self.hooks.trigger(
            SUBSCRIBERS_HOOK, {"event": event}, {}
        )

        sent = []
        for guid, channels in subscribers.items():
            try:
                recipient = self.accounts.get(guid)
            except NotFound:
                logger.warning("Skipping unknown subscriber %s", guid)
                continue

            if recipient.is_banned:
                logger.debug("Skipping banned subscriber %s", guid)
                continue

            notification = Notification(
                subject=translate("notification:subject", [event.action], recipient.language),
                body=translate("notification:body", [self.site.name], recipient.language),
                recipient_guid=recipient.guid,
                action=event.action,
                object_guid=event.obj.guid,
                language=recipient.language,
            )
            notification = self.hooks.trigger(
                prepare_hook(event.action),
                {
                    "recipient": recipient,
                    "object": event.obj,
                    "language": recipient.language,
                    "event": event,
                },
                notification,
            )

            delivered = False
            for channel in channels:
                try:
                    self.notifier.send(
                        recipient.guid,
                        recipient.email,
                        notification.subject,
                        notification.body,
                        channel,
                    )
                except Exception:
                    logger.exception("Failed to deliver %s notification to %s", event.action, guid)
                    continue
                delivered = True

            if delivered:
                sent.append(notification)

        return sent


@dataclass
class BanNotificationDispatcher:
    """Reacts to ban and unban state changes of accounts."""

    notifier: NotificationTransport
    site: Site
    urls: UrlBuilder
    enabled: bool = True

    def on_ban(self, account: Account) -> bool:
        """
        Email the banned account directly.

        Returns:
            True if a notification was handed to the transport
        """
        if not self.enabled:
            return False

        language = account.language
        subject = translate("user:notification:ban:subject", [self.site.name], language)
        body = translate(
            "user:notification:ban:body",
            [account.display_name, self.site.name, self.site.url],
            language,
        )

        try:
            self.notifier.send(account.guid, account.email, subject, body, "email")
        except Exception:
            logger.exception("Failed to deliver ban notification to account %s", account.guid)
            return False

        logger.info("Sent ban notification to account %s", account.guid)
        return True

    def get_unban_subscribers(
        self, params: dict, subscribers: dict[int, list[str]]
    ) -> dict[int, list[str]] | None:
        """Add the unbanned account itself to the subscribers of its unban event."""
        if not self.enabled:
            return None

        event = params.get("event")
        if not isinstance(event, NotificationEvent) or event.action != "unban":
            return None

        if not isinstance(event.obj, Account):
            return None

        subscribers = dict(subscribers or {})
        subscribers[event.obj.guid] = ["email"]
        return subscribers

    def prepare_unban_notification(
        self, params: dict, notification: Notification
    ) -> Notification | None:
        """
        Supply unban content for the notification addressed to the unbanned account.

        Notifications for any other recipient are left untouched.
        """
        if not isinstance(notification, Notification):
            return None

        recipient = params.get("recipient")
        obj = params.get("object")
        language = params.get("language")

        if not isinstance(recipient, Account) or not isinstance(obj, Account):
            return None

        if recipient.guid != obj.guid:
            return None

        notification.subject = translate(
            "user:notification:unban:subject", [self.site.name], language
        )
        notification.body = translate(
            "user:notification:unban:body",
            [recipient.display_name, self.site.name, self.site.url],
            language,
        )
        notification.url = self.urls.profile_url(recipient.username)
        return notification

    def register(self, bus: EventBus, pipeline: SubscriptionNotifier | None = None) -> None:
        """Subscribe the ban/unban behaviours on bus."""
        bus.on("ban", self.on_ban)
        bus.hooks.register(SUBSCRIBERS_HOOK, self.get_unban_subscribers)
        bus.hooks.register(prepare_hook("unban"), self.prepare_unban_notification)
        if pipeline is not None:
            bus.on("unban", lambda account: pipeline.process(NotificationEvent("unban", account)))
