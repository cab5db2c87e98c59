"""Request and response bodies shared by the routes and the interpreter."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SetEntry(BaseModel):
    set_number: Optional[int] = None
    reps: int = Field(ge=0)


def number_sets(sets: List[SetEntry]) -> List[dict]:
    """Renumber sets 1..n in the order given."""
    return [{"set_number": i, "reps": s.reps} for i, s in enumerate(sets, start=1)]


class ParsedWorkout(BaseModel):
    """Structured workout extracted from a transcript by the language model."""

    exercise: str = Field(min_length=1)
    weight_kg: Optional[float] = None
    sets: List[SetEntry] = Field(default_factory=list)
    muscle_group: Optional[str] = None
    notes: Optional[str] = ""

    def to_payload(self) -> dict:
        return {
            "exercise": self.exercise,
            "weight_kg": self.weight_kg,
            "sets": number_sets(self.sets),
            "muscle_group": self.muscle_group or "",
            "notes": self.notes or "",
        }


class ParseRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    transcript: str = Field(min_length=1)
    userId: Optional[str] = None


class WorkoutCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    userId: str = Field(min_length=1)
    exerciseName: str = Field(min_length=1)
    weightKg: Optional[float] = None
    sets: List[SetEntry] = Field(min_length=1)
    muscleGroup: Optional[str] = None
    notes: Optional[str] = None
    date: Optional[dt.date] = None


class SplitDay(BaseModel):
    day: str = Field(min_length=1)
    muscleGroups: List[str] = Field(default_factory=list)


class WorkoutSplitSave(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    userId: str = Field(min_length=1)
    splits: List[SplitDay]
