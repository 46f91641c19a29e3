"""
Channel connectivity probe.

Each enabled channel gets a status. LinkedIn is worked by hand, so it is
always "manual" and counts as connected. Everything else is resolved by a
single remote check; if that check fails, every probed channel is
reported disconnected.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from src.functions_client import invoke, RemoteCallError
from src.launchpad.channels import ChannelConfig

logger = logging.getLogger(__name__)

PROBE_FUNCTION = "check-integrations"

# channel type -> (display name, provider key in the probe response)
PROBED_CHANNELS = {
    'email': ("Instantly", "instantly"),
    'sms': ("Twilio SMS", "twilio"),
    'voice': ("ARIA Voice", "retell"),
}


@dataclass(frozen=True)
class IntegrationStatus:
    name: str
    type: str  # email, sms, voice, linkedin
    status: str  # checking, connected, disconnected, manual
    details: str = ""
    account: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return self.status in ('connected', 'manual')

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'type': self.type,
            'status': self.status,
            'details': self.details,
            'account': self.account,
            'error': self.error,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'IntegrationStatus':
        return cls(
            name=data.get('name', ''),
            type=data.get('type', ''),
            status=data.get('status', 'disconnected'),
            details=data.get('details') or '',
            account=data.get('account'),
            error=data.get('error'),
        )


def initial_statuses(channels: ChannelConfig) -> list[IntegrationStatus]:
    """One status per enabled channel, before anything has been checked."""
    statuses = []
    enabled = {
        'email': channels.email is not None,
        'sms': channels.sms is not None,
        'voice': channels.ai_call is not None,
    }
    for channel_type, (name, _) in PROBED_CHANNELS.items():
        if enabled[channel_type]:
            statuses.append(IntegrationStatus(
                name=name,
                type=channel_type,
                status='checking',
                details='Verifying connection...',
            ))
    if channels.linkedin:
        statuses.append(IntegrationStatus(
            name="LinkedIn",
            type='linkedin',
            status='manual',
            details='Reminders will be generated',
        ))
    return statuses


def _resolve(status: IntegrationStatus, data: dict, sender_email: Optional[str]) -> IntegrationStatus:
    _, key = PROBED_CHANNELS[status.type]
    provider = data.get(key)

    if not isinstance(provider, dict):
        return replace(status, status='disconnected', details='No response for this channel')

    error = provider.get('error') or None
    if not provider.get('connected'):
        return replace(
            status,
            status='disconnected',
            details=error or 'Connection failed',
            error=error,
        )

    if status.type == 'email':
        return replace(
            status,
            status='connected',
            details=f"{sender_email or 'Email sender'} ready",
            account=sender_email,
        )
    if status.type == 'sms':
        phone = provider.get('phoneNumber')
        return replace(status, status='connected', details=phone or 'SMS ready', account=phone)
    return replace(status, status='connected', details='ARIA AI ready')


def probe_integrations(channels: ChannelConfig, sender_email: Optional[str] = None) -> list[IntegrationStatus]:
    """
    Check connectivity for every enabled channel.

    Never raises: a failed probe marks every probed channel disconnected.
    """
    statuses = initial_statuses(channels)
    probed = [s for s in statuses if s.status == 'checking']
    if not probed:
        return statuses

    payload = {
        'checkEmail': channels.email is not None,
        'checkSms': channels.sms is not None,
        'checkVoice': channels.ai_call is not None,
        'senderEmail': sender_email,
    }

    try:
        data = invoke(PROBE_FUNCTION, payload)
    except RemoteCallError as exc:
        logger.error("Integration check failed: %s", exc)
        return [
            s if s.status == 'manual'
            else replace(s, status='disconnected', details='Check failed', error=str(exc))
            for s in statuses
        ]

    resolved = [
        s if s.status == 'manual' else _resolve(s, data, sender_email)
        for s in statuses
    ]

    for s in resolved:
        log = logger.info if s.is_ready else logger.warning
        log("Integration %s: %s (%s)", s.name, s.status, s.details)

    return resolved


def all_connected(statuses: list[IntegrationStatus]) -> bool:
    """True when every channel is connected or manual."""
    return all(s.is_ready for s in statuses)
