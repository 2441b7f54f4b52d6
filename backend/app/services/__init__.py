"""Business logic services for the ElderCare notification API."""

from app.services.collector import EventCollector
from app.services.alert_log import AlertLogGate
from app.services.dispatcher import ChannelDispatcher
from app.services.email_chain import EmailMessage, EmailProviderChain
from app.services.sms import SmsProvider, normalize_phone
from app.services.aggregator import aggregate
from app.services.sweep import DailySweep, SweepAlreadyRunning, run_daily_sweep

__all__ = [
    "EventCollector",
    "AlertLogGate",
    "ChannelDispatcher",
    "EmailMessage",
    "EmailProviderChain",
    "SmsProvider",
    "normalize_phone",
    "aggregate",
    "DailySweep",
    "SweepAlreadyRunning",
    "run_daily_sweep",
]
