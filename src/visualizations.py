"""
Workout Visualization
=====================
Plotly charts and pandas tables built from API payloads:
    progress points   [{date, weight, totalReps, volume}]
    workout history   [{date, weight_kg, sets, exercises: {name, muscle_group}}]
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots

log = logging.getLogger("visualizations")

HISTORY_COLUMNS = ["Date", "Exercise", "Muscle Group", "Weight (kg)", "Sets", "Total Reps", "Volume (kg)"]


def _short_date(value: Any) -> str:
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return str(value or "")
    return f"{ts:%b} {ts.day}"


class WorkoutVisualizer:
    """Creates Plotly figures and tables of workout data."""

    def __init__(self):
        self.colors = {
            "weight": "#8884d8",
            "volume": "#82ca9d",
            "reps": "#F8B400",
        }

    # ── 1. Progress ───────────────────────────────────────────

    def progress_frame(self, points: List[Dict[str, Any]]) -> pd.DataFrame:
        df = pd.DataFrame(points, columns=["date", "weight", "totalReps", "volume"])
        df["label"] = df["date"].map(_short_date)
        return df

    def create_progress_chart(self, points: List[Dict[str, Any]],
                              exercise_name: Optional[str] = None) -> Optional[go.Figure]:
        """Weight and volume progression, one panel each."""
        if not points:
            log.info("No progress data available for visualization")
            return None

        df = self.progress_frame(points)
        fig = make_subplots(
            rows=2, cols=1,
            subplot_titles=("Weight Progression", "Volume Progression"),
            vertical_spacing=0.15,
        )
        fig.add_trace(
            go.Scatter(x=df["label"], y=df["weight"],
                       name="Weight (kg)", mode="lines+markers",
                       line=dict(color=self.colors["weight"], width=2)),
            row=1, col=1,
        )
        fig.add_trace(
            go.Scatter(x=df["label"], y=df["volume"],
                       name="Volume (kg)", mode="lines+markers",
                       line=dict(color=self.colors["volume"], width=2),
                       customdata=df["totalReps"],
                       hovertemplate="%{y:.0f} kg (%{customdata} reps)<extra></extra>"),
            row=2, col=1,
        )
        fig.update_layout(
            height=650, showlegend=True,
            title_text=f"Progress: {exercise_name or 'Exercise'}",
            hovermode="x unified",
        )
        return fig

    # ── 2. History table ──────────────────────────────────────

    def workouts_table(self, workouts: List[Dict[str, Any]]) -> pd.DataFrame:
        rows = []
        for w in workouts:
            sets = w.get("sets") or []
            reps = [int(s.get("reps") or 0) for s in sets]
            total = sum(reps)
            weight = w.get("weight_kg")
            exercise = w.get("exercises") or {}
            rows.append({
                "Date": str(w.get("date") or ""),
                "Exercise": exercise.get("name") or "",
                "Muscle Group": exercise.get("muscle_group") or "",
                "Weight (kg)": weight,
                "Sets": ", ".join(str(r) for r in reps),
                "Total Reps": total,
                "Volume (kg)": round((weight or 0) * total),
            })
        return pd.DataFrame(rows, columns=HISTORY_COLUMNS)
