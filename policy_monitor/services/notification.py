"""Email alerts for highly relevant policies.

``build_notification_bundle`` assembles everything an alert needs; the
``EmailNotifier`` renders the bundle and delivers it over SMTP.
"""
from __future__ import annotations

import asyncio
import html
import logging
import re
import smtplib
from datetime import date, datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from pydantic import BaseModel, Field

from policy_monitor.config import settings
from policy_monitor.crawlers.utils.date_parser import days_until
from policy_monitor.schemas.policy import PolicyAnalysis, PolicyRecord
from policy_monitor.services.drafts.tones import NOTIFICATION_TONES

logger = logging.getLogger(__name__)

MAX_DRAFTS = 3
URGENT_WITHIN_DAYS = 7

DRAFT_HEADINGS = {
    "legal": "LEGAL APPROACH",
    "emotional": "EMOTIONAL APPROACH",
    "dataBacked": "DATA-DRIVEN APPROACH",
    "financial": "FINANCIAL APPROACH",
    "business": "BUSINESS APPROACH",
    "livelihood": "LIVELIHOOD APPROACH",
}


class NotificationError(Exception):
    """Raised when an alert cannot be delivered."""


class NotificationBundle(BaseModel):
    policyId: str
    title: str
    ministry: str
    description: str
    deadline: str
    sourceUrl: str
    discoveredAt: str
    daysUntilDeadline: int | None = None
    relevanceScore: int = Field(ge=0, le=100)
    urgencyLevel: str
    analysis: str = ""
    animalWelfareAspects: list[str] = Field(default_factory=list)
    isAnimalWelfare: bool
    publicSubmissionsOpen: bool
    isUrgent: bool
    drafts: dict[str, str] = Field(default_factory=dict)


def build_notification_bundle(
    record: PolicyRecord,
    analysis: PolicyAnalysis,
    drafts: dict[str, str],
    *,
    today: date | None = None,
) -> NotificationBundle:
    """Complete alert payload; at most three drafts, notification tones first."""
    ordered = [t for t in NOTIFICATION_TONES if drafts.get(t)]
    ordered += [t for t in drafts if t not in ordered and drafts[t]]
    left = days_until(record.deadline, today=today)

    return NotificationBundle(
        policyId=record.id,
        title=record.title,
        ministry=record.ministry,
        description=record.description,
        deadline=record.deadline,
        sourceUrl=record.sourceUrl,
        discoveredAt=record.discoveredAt,
        daysUntilDeadline=left,
        relevanceScore=int(analysis.relevanceScore),
        urgencyLevel=analysis.urgencyLevel,
        analysis=analysis.analysis,
        animalWelfareAspects=list(analysis.animalWelfareAspects),
        isAnimalWelfare=bool(analysis.isAnimalWelfare),
        publicSubmissionsOpen=bool(analysis.publicSubmissionsOpen),
        isUrgent=left is not None and left <= URGENT_WITHIN_DAYS,
        drafts={t: drafts[t] for t in ordered[:MAX_DRAFTS]},
    )


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_subject(bundle: NotificationBundle) -> str:
    prefix = "URGENT: " if bundle.isUrgent else ""
    return f"{prefix}New Animal Welfare Policy Alert: {bundle.title}"


def render_text(bundle: NotificationBundle) -> str:
    lines = [
        "ANIMAL WELFARE POLICY ALERT",
        bundle.title,
        "",
        f"Ministry: {bundle.ministry}",
        f"Deadline: {bundle.deadline}",
        f"Days Remaining: {bundle.daysUntilDeadline if bundle.daysUntilDeadline is not None else 'unknown'}",
        "",
        "DESCRIPTION:",
        bundle.description,
        "",
        "AI ANALYSIS:",
        f"- Relevance Score: {bundle.relevanceScore}%",
        f"- Animal Welfare Related: {'Yes' if bundle.isAnimalWelfare else 'No'}",
        f"- Public Submissions Open: {'Yes' if bundle.publicSubmissionsOpen else 'No'}",
        f"- Urgency Level: {bundle.urgencyLevel}",
        f"- Analysis: {bundle.analysis}",
        "",
        "GENERATED DRAFTS:",
    ]
    for tone, text in bundle.drafts.items():
        lines += ["", f"{DRAFT_HEADINGS.get(tone, tone.upper())}:", text]
    lines += ["", f"SOURCE: {bundle.sourceUrl}", "", "---",
              "Generated by Animal Welfare Policy Monitoring System"]
    return "\n".join(lines)


def render_html(bundle: NotificationBundle) -> str:
    esc = html.escape
    if bundle.daysUntilDeadline is None:
        notice = (f"<p><strong>Deadline Notice:</strong> Days remaining unknown, "
                  f"check the deadline ({esc(bundle.deadline)}) at the source.</p>")
    elif bundle.isUrgent:
        notice = (f"<p><strong>URGENT:</strong> This consultation deadline is in "
                  f"{bundle.daysUntilDeadline} days.</p>")
    else:
        notice = (f"<p><strong>Deadline Notice:</strong> You have "
                  f"{bundle.daysUntilDeadline} days to submit your response.</p>")
    aspects = "".join(f"<li>{esc(a)}</li>" for a in bundle.animalWelfareAspects)
    drafts = "".join(
        f"<h3>{esc(DRAFT_HEADINGS.get(tone, tone))}</h3><div>{esc(text).replace(chr(10), '<br>')}</div>"
        for tone, text in bundle.drafts.items()
    )
    return (
        "<html><body>"
        "<h1>Animal Welfare Policy Alert</h1>"
        f"{notice}"
        f"<h2>{esc(bundle.title)}</h2>"
        f"<p><strong>Ministry:</strong> {esc(bundle.ministry)}</p>"
        f"<p><strong>Deadline:</strong> {esc(bundle.deadline)}</p>"
        f"<p><strong>Description:</strong> {esc(bundle.description)}</p>"
        f'<p><strong>Source:</strong> <a href="{esc(bundle.sourceUrl)}">{esc(bundle.sourceUrl)}</a></p>'
        f"<h3>AI Analysis</h3>"
        f"<p>Relevance Score: {bundle.relevanceScore}% | Urgency: {esc(bundle.urgencyLevel.upper())} | "
        f"Animal Welfare Related: {'YES' if bundle.isAnimalWelfare else 'NO'}</p>"
        f"<p>{esc(bundle.analysis)}</p>"
        f"{'<ul>' + aspects + '</ul>' if aspects else ''}"
        f"<h2>Generated Response Drafts</h2>{drafts}"
        "</body></html>"
    )


def draft_attachment_name(title: str, tone: str) -> str:
    safe = re.sub(r"[^a-zA-Z0-9]", "_", title)
    return f"{safe}_{tone[0].upper()}{tone[1:]}_Draft.txt"


# ---------------------------------------------------------------------------
# Delivery
# ---------------------------------------------------------------------------


class EmailNotifier:
    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        user: str | None = None,
        password: str | None = None,
        recipient: str | None = None,
    ):
        self.host = host or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.user = user if user is not None else settings.EMAIL_USER
        self.password = password if password is not None else settings.EMAIL_PASS
        self.recipient = recipient or settings.EMAIL_TO or self.user

    @property
    def is_configured(self) -> bool:
        return bool(self.user and self.password and self.recipient)

    def build_message(self, bundle: NotificationBundle) -> MIMEMultipart:
        msg = MIMEMultipart("mixed")
        msg["Subject"] = render_subject(bundle)
        msg["From"] = f"Policy Monitor <{self.user}>"
        msg["To"] = self.recipient

        body = MIMEMultipart("alternative")
        body.attach(MIMEText(render_text(bundle), "plain", "utf-8"))
        body.attach(MIMEText(render_html(bundle), "html", "utf-8"))
        msg.attach(body)

        for tone, text in bundle.drafts.items():
            part = MIMEText(text, "plain", "utf-8")
            part.add_header("Content-Disposition", "attachment",
                            filename=draft_attachment_name(bundle.title, tone))
            msg.attach(part)
        return msg

    def _deliver(self, msg: MIMEMultipart) -> None:
        try:
            with smtplib.SMTP(self.host, self.port, timeout=30) as server:
                server.ehlo()
                server.starttls()
                server.ehlo()
                server.login(self.user, self.password)
                server.sendmail(self.user, [self.recipient], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"Email delivery failed: {e}") from e

    def send(self, bundle: NotificationBundle) -> None:
        if not self.is_configured:
            raise NotificationError("EMAIL_USER / EMAIL_PASS not configured")
        self._deliver(self.build_message(bundle))
        logger.info("Alert email sent to %s for %s", self.recipient, bundle.policyId)

    async def send_async(self, bundle: NotificationBundle) -> None:
        await asyncio.to_thread(self.send, bundle)

    def build_test_message(self, sent_at: datetime | None = None) -> MIMEMultipart:
        sent_at = sent_at or datetime.now(timezone.utc)
        msg = MIMEMultipart("alternative")
        msg["Subject"] = "Animal Welfare Monitor - Test Email"
        msg["From"] = f"Policy Monitor <{self.user}>"
        msg["To"] = self.recipient
        msg.attach(MIMEText(
            "Test email successful! Your email configuration is working correctly.", "plain", "utf-8",
        ))
        msg.attach(MIMEText(
            "<html><body><h2>Test Email Successful!</h2>"
            "<p>Your email configuration is working correctly.</p>"
            "<p>The Animal Welfare Policy Monitoring System is ready to send notifications.</p>"
            f"<p><small>Sent at: {sent_at.isoformat()}</small></p></body></html>",
            "html", "utf-8",
        ))
        return msg

    async def send_test_async(self) -> None:
        """Send a short message confirming the SMTP settings work."""
        if not self.is_configured:
            raise NotificationError("EMAIL_USER / EMAIL_PASS not configured")
        await asyncio.to_thread(self._deliver, self.build_test_message())
        logger.info("Test email sent to %s", self.recipient)


_notifier: EmailNotifier | None = None


def get_email_notifier() -> EmailNotifier:
    global _notifier
    if _notifier is None:
        _notifier = EmailNotifier()
    return _notifier
