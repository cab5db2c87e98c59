"""
Shared constants used across multiple modules.
Single source of truth for table layouts, weekdays and the exercise library.
"""

# Columns per table; the persistence gateway only accepts these identifiers
TABLE_COLUMNS = {
    "exercises": ["id", "name", "muscle_group", "aliases", "created_at"],
    "workouts": [
        "id", "user_id", "exercise_id", "date", "weight_kg",
        "sets", "notes", "created_at",
    ],
    "workout_splits": ["id", "user_id", "day_of_week", "muscle_groups", "created_at"],
}

WEEKDAYS = [
    "Monday", "Tuesday", "Wednesday", "Thursday",
    "Friday", "Saturday", "Sunday",
]

MUSCLE_GROUPS = [
    "Chest", "Back", "Shoulders", "Legs", "Biceps", "Triceps", "Core", "Full Body",
]

DEFAULT_MUSCLE_GROUP = "Unknown"

# Spoken alias -> canonical exercise name, with the muscle group used for seeding
EXERCISE_LIBRARY = {
    "Bench Press": ("Chest", ["bench"]),
    "Barbell Squat": ("Legs", ["squat"]),
    "Deadlift": ("Back", ["deadlift"]),
    "Overhead Press": ("Shoulders", ["ohp", "overhead press"]),
    "Barbell Row": ("Back", ["rows"]),
    "Pull-ups": ("Back", ["pull ups", "pullups"]),
    "Lat Pulldown": ("Back", ["lat pulldown"]),
    "Shoulder Press": ("Shoulders", ["shoulder press"]),
}
