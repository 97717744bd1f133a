# devgad/services/mailer.py
# Outgoing verification / sign-in mails. Transport is a deployment concern; we log and keep an outbox.

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from devgad.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class OutgoingMail:
    kind: str
    to: str
    subject: str
    body: str
    link: str
    sender: str
    sent_at: datetime = field(default_factory=datetime.utcnow)


class Mailer:
    def __init__(self, sender: str):
        self.sender = sender
        self._lock = threading.Lock()
        self._outbox: List[OutgoingMail] = []

    @property
    def outbox(self) -> List[OutgoingMail]:
        with self._lock:
            return list(self._outbox)

    def last_to(self, email: str, kind: Optional[str] = None) -> Optional[OutgoingMail]:
        for mail in reversed(self.outbox):
            if mail.to == email and (kind is None or mail.kind == kind):
                return mail
        return None

    def send_verification(self, email: str, link: str) -> OutgoingMail:
        return self._dispatch(OutgoingMail(
            kind="verify_email",
            to=email,
            subject="Verify your email for DevgadHapus",
            body=f"Follow this link to verify your email address.\n\n{link}\n",
            link=link,
            sender=self.sender,
        ))

    def send_sign_in_link(self, email: str, link: str) -> OutgoingMail:
        return self._dispatch(OutgoingMail(
            kind="email_link",
            to=email,
            subject="Sign in to DevgadHapus",
            body=f"We received a request to sign in using this email address.\n\n{link}\n",
            link=link,
            sender=self.sender,
        ))

    def reset(self) -> None:
        with self._lock:
            self._outbox.clear()

    def _dispatch(self, mail: OutgoingMail) -> OutgoingMail:
        with self._lock:
            self._outbox.append(mail)
        logger.info(f"Dispatched {mail.kind} mail to {mail.to}")
        return mail


mailer = Mailer(settings.MAIL_FROM)
