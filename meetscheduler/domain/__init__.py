"""
Domain layer - Pure business logic without external dependencies.
"""

from .models import CandidateSlot, GenerationRequest, TimeRange, WorkingWindow
from .slot_generator import SlotGenerator, generate_slots

__all__ = [
    "CandidateSlot",
    "GenerationRequest",
    "TimeRange",
    "WorkingWindow",
    "SlotGenerator",
    "generate_slots",
]
