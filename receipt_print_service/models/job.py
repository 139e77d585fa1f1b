"""
Print Job Model
===============

Scopes one print request from entry to response.
"""

import time
import uuid
from datetime import datetime
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List

from .command import Command
from .printer import DeviceDescriptor


@dataclass
class PrintJob:
    """Print job state and outcome."""

    # Identification
    id: str = field(default_factory=lambda: f"JOB-{str(uuid.uuid4())[:8].upper()}")

    # Target and payload
    device: Optional[DeviceDescriptor] = None
    commands: List[Command] = field(default_factory=list)

    # Monotonic deadline (time.monotonic() based)
    deadline: Optional[float] = None

    # Status
    status: str = "pending"  # pending, printing, completed, failed
    error_kind: Optional[str] = None
    error_message: Optional[str] = None

    # Timestamps
    created_at: datetime = field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "completed"

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline (never negative)."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = {
            'id': self.id,
            'device': self.device.to_dict() if self.device else None,
            'commands': len(self.commands),
            'status': self.status,
            'error_kind': self.error_kind,
            'error_message': self.error_message,
        }
        for key in ['created_at', 'started_at', 'completed_at']:
            value = getattr(self, key)
            data[key] = value.isoformat() if value else None
        return data

    def start(self):
        """Mark job as started."""
        self.status = "printing"
        self.started_at = datetime.now()

    def complete(self):
        """Mark job as completed."""
        self.status = "completed"
        self.completed_at = datetime.now()

    def fail(self, kind: str, error: str):
        """Mark job as failed."""
        self.status = "failed"
        self.completed_at = datetime.now()
        self.error_kind = kind
        self.error_message = error
