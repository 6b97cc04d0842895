from __future__ import annotations

from enum import IntEnum


class Priority(IntEnum):
    LOW = 1, "Low", "#28a745"
    MEDIUM = 2, "Medium", "#ffc107"
    HIGH = 3, "High", "#fd7e14"
    URGENT = 4, "Urgent", "#dc3545"

    def __new__(cls, level: int, display_name: str, color: str) -> Priority:
        member = int.__new__(cls, level)
        member._value_ = level
        member.display_name = display_name
        member.color = color
        return member

    @property
    def level(self) -> int:
        return int(self.value)

    def __str__(self) -> str:
        return self.display_name

    @classmethod
    def from_level(cls, level: int) -> Priority:
        for priority in cls:
            if priority.level == level:
                return priority
        return cls.MEDIUM

    @classmethod
    def from_display_name(cls, display_name: str) -> Priority:
        for priority in cls:
            if priority.display_name.lower() == (display_name or "").strip().lower():
                return priority
        return cls.MEDIUM
