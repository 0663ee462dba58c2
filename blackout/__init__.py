"""
Blackout — daily planned power-outage reports over Telegram.

Public API:
    from blackout import SchedulingEngine, JobScheduler, BlackoutConfig
"""

__version__ = "0.1.0"

# Core
from blackout.core.config import BlackoutConfig
from blackout.core.errors import BlackoutError

# Bot
from blackout.bot.actions import Action, Awaiting, InboundEvent
from blackout.bot.engine import SchedulingEngine
from blackout.bot.texts import Texts

# Scheduling and storage
from blackout.scheduler.jobs import JobScheduler
from blackout.store.base import SubscriberStore
from blackout.store.subscriber import Subscriber

__all__ = [
    # Core
    "BlackoutConfig",
    "BlackoutError",
    # Bot
    "Action",
    "Awaiting",
    "InboundEvent",
    "SchedulingEngine",
    "Texts",
    # Scheduling and storage
    "JobScheduler",
    "SubscriberStore",
    "Subscriber",
]
