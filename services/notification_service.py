# services/notification_service.py
"""
Notification dispatch.

Lifecycle transitions decide *what* to tell whom; this module hands each
message to the delivery channels. Delivery happens after the transition has
committed and a failing channel is logged, never raised: the state change
is already durable and must not be reported as failed.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from database import get_session_context
from models import Notification
from utils.email import send_notification_email

import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationMessage:
     recipient_id: int
     actor_id: Optional[int]
     type: str
     message: str
     link: Optional[str] = None
     recipient_email: Optional[str] = None
     subject: Optional[str] = None


class InAppChannel:
     """Stores the message in the notifications feed using its own session."""

     name = "in_app"

     def __init__(self, session_factory=get_session_context):
          self.session_factory = session_factory

     def send(self, note: NotificationMessage) -> None:
          with self.session_factory() as db:
               db.add(Notification(
                    recipient_id=note.recipient_id,
                    actor_id=note.actor_id,
                    type=note.type,
                    message=note.message,
                    link=note.link,
               ))


class EmailChannel:
     """Brevo e-mail; messages without a recipient address are skipped."""

     name = "email"

     def send(self, note: NotificationMessage) -> None:
          if not note.recipient_email:
               return
          subject = note.subject or note.type.replace("_", " ").capitalize()
          send_notification_email(note.recipient_email, subject, note.message)


def default_channels() -> list:
     channels = [InAppChannel()]
     if config.BREVO_API_KEY:
          channels.append(EmailChannel())
     return channels


class NotificationDispatcher:
     """
     Fans messages out to every channel.

     `defer` hands delivery to something that runs later (FastAPI's
     BackgroundTasks.add_task in the routers); without it delivery runs
     inline once the caller invokes dispatch.
     """

     def __init__(self, channels: Optional[list] = None, defer: Optional[Callable] = None):
          self.channels = channels if channels is not None else default_channels()
          self.defer = defer

     def dispatch(self, messages: Iterable[NotificationMessage]) -> None:
          messages = list(messages)
          if not messages:
               return
          if self.defer is not None:
               self.defer(self.deliver_all, messages)
          else:
               self.deliver_all(messages)

     def deliver_all(self, messages: Iterable[NotificationMessage]) -> None:
          for note in messages:
               self.deliver(note)

     def deliver(self, note: NotificationMessage) -> None:
          for channel in self.channels:
               try:
                    channel.send(note)
               except Exception:
                    logger.exception(
                         "Notification %s to recipient %s failed on channel %s",
                         note.type, note.recipient_id, getattr(channel, "name", channel),
                    )
