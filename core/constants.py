"""
Shared constants.

Limits and defaults for plan composition, the set editor and draft recovery.
This module has no dependencies on models or services to avoid circular imports.
"""

# Maximum number of active (non-deleted) training plans per user
MAX_PLANS_PER_USER = 7

# Plan name bounds enforced by the wizard (step 1)
MIN_PLAN_NAME_LENGTH = 3
MAX_PLAN_NAME_LENGTH = 100

# Maximum description length accepted by the API
MAX_DESCRIPTION_LENGTH = 1000

# Per-plan and per-exercise collection limits
MAX_EXERCISES_PER_PLAN = 50
MAX_SETS_PER_EXERCISE = 50

# Set bounds (inclusive)
MIN_REPETITIONS = 1
MAX_REPETITIONS = 999
MIN_WEIGHT = 0.0
MAX_WEIGHT = 999.99

# Default set used when an exercise has no (valid) sets yet
DEFAULT_SET_REPETITIONS = 1
DEFAULT_SET_WEIGHT = 2.5

# Bulk add bounds
MIN_BULK_ADD_COUNT = 1
MAX_BULK_ADD_COUNT = 10

# Draft recovery
DRAFT_KEY = "training-plan-draft"
DRAFT_TTL_DAYS = 7
DRAFT_AUTOSAVE_INTERVAL_SECONDS = 30.0
