"""
API Routes Package
==================
One router per resource; api.py mounts them on the FastAPI app.

Modules:
  helpers       - dependencies, error responses, joins, derived metrics
  workouts      - /api/workouts, /api/workouts/progress/{exercise_id}
  exercises     - /api/exercises
  workout_split - /api/workout-split
  ai            - /api/ai/parse (rate limited)
"""
