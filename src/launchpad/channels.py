"""
Job and channel configuration for a campaign.

A missing sub-config means the channel is disabled. The config objects are
frozen so nothing can change them once a launch has started.
"""

from dataclasses import dataclass, asdict
from datetime import date
from typing import Optional


@dataclass
class Job:
    """The job a campaign recruits for."""
    id: str
    job_name: str = ""
    specialty: str = ""
    facility_name: str = ""
    city: str = ""
    state: str = ""
    bill_rate: Optional[float] = None
    pay_rate: Optional[float] = None
    start_date: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'Job':
        return cls(
            id=str(data.get('id', '')),
            job_name=data.get('job_name') or '',
            specialty=data.get('specialty') or '',
            facility_name=data.get('facility_name') or '',
            city=data.get('city') or '',
            state=data.get('state') or '',
            bill_rate=data.get('bill_rate'),
            pay_rate=data.get('pay_rate'),
            start_date=data.get('start_date'),
        )


def default_campaign_name(job: Optional[Job], today: Optional[date] = None) -> str:
    """Build a campaign name like "Anesthesiology - Mercy General - 03/14/2026"."""
    today = today or date.today()
    if not job:
        return f"Campaign - {today.strftime('%m/%d/%Y')}"
    label = job.specialty or job.job_name or "Campaign"
    facility = job.facility_name or "Facility"
    return f"{label} - {facility} - {today.strftime('%m/%d/%Y')}"


@dataclass(frozen=True)
class EmailChannel:
    sender: str
    sequence_length: int = 3
    gap_days: int = 3


@dataclass(frozen=True)
class SmsChannel:
    from_number: str
    sequence_length: int = 2


@dataclass(frozen=True)
class VoiceChannel:
    from_number: str
    call_day: int = 3
    transfer_to: str = ""


@dataclass(frozen=True)
class Schedule:
    start_date: str
    send_window_start: str = "09:00"
    send_window_end: str = "17:00"
    timezone: str = "America/New_York"
    weekdays_only: bool = True


@dataclass(frozen=True)
class ChannelConfig:
    """Which channels a campaign uses, and how."""
    email: Optional[EmailChannel] = None
    sms: Optional[SmsChannel] = None
    ai_call: Optional[VoiceChannel] = None
    linkedin: bool = False
    schedule: Optional[Schedule] = None

    @property
    def has_any_channel(self) -> bool:
        return bool(self.email or self.sms or self.ai_call or self.linkedin)

    def enabled_channels(self) -> list[str]:
        """Names of the enabled channels, in a fixed order."""
        names = []
        if self.email:
            names.append('email')
        if self.sms:
            names.append('sms')
        if self.ai_call:
            names.append('ai_call')
        if self.linkedin:
            names.append('linkedin')
        return names

    @property
    def summary(self) -> str:
        """Comma-separated channel summary stored on the campaign row."""
        return ",".join(self.enabled_channels())

    def to_payload(self) -> dict:
        """Wire form used by the remote functions (camelCase keys)."""
        payload: dict = {
            'email': None,
            'sms': None,
            'aiCall': None,
            'linkedin': self.linkedin,
        }
        if self.email:
            payload['email'] = {
                'sender': self.email.sender,
                'sequenceLength': self.email.sequence_length,
                'gapDays': self.email.gap_days,
            }
        if self.sms:
            payload['sms'] = {
                'fromNumber': self.sms.from_number,
                'sequenceLength': self.sms.sequence_length,
            }
        if self.ai_call:
            payload['aiCall'] = {
                'fromNumber': self.ai_call.from_number,
                'callDay': self.ai_call.call_day,
                'transferTo': self.ai_call.transfer_to,
            }
        if self.schedule:
            payload['schedule'] = {
                'startDate': self.schedule.start_date,
                'sendWindowStart': self.schedule.send_window_start,
                'sendWindowEnd': self.schedule.send_window_end,
                'timezone': self.schedule.timezone,
                'weekdaysOnly': self.schedule.weekdays_only,
            }
        return payload

    @classmethod
    def from_payload(cls, data: Optional[dict]) -> 'ChannelConfig':
        data = data or {}
        email = data.get('email')
        sms = data.get('sms')
        ai_call = data.get('aiCall')
        schedule = data.get('schedule')

        return cls(
            email=EmailChannel(
                sender=email.get('sender', ''),
                sequence_length=int(email.get('sequenceLength', 3)),
                gap_days=int(email.get('gapDays', 3)),
            ) if email else None,
            sms=SmsChannel(
                from_number=sms.get('fromNumber', ''),
                sequence_length=int(sms.get('sequenceLength', 2)),
            ) if sms else None,
            ai_call=VoiceChannel(
                from_number=ai_call.get('fromNumber', ''),
                call_day=int(ai_call.get('callDay', 3)),
                transfer_to=ai_call.get('transferTo', ''),
            ) if ai_call else None,
            linkedin=bool(data.get('linkedin', False)),
            schedule=Schedule(
                start_date=schedule.get('startDate', ''),
                send_window_start=schedule.get('sendWindowStart', '09:00'),
                send_window_end=schedule.get('sendWindowEnd', '17:00'),
                timezone=schedule.get('timezone', 'America/New_York'),
                weekdays_only=bool(schedule.get('weekdaysOnly', True)),
            ) if schedule else None,
        )
