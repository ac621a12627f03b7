STREAK_TYPE_OVERALL = "overall"
STREAK_TYPE_MEDITATION = "meditation"
STREAK_TYPE_BREATHING = "breathing"
STREAK_TYPE_COURSE = "course"

STREAK_TYPES = frozenset(
    {
        STREAK_TYPE_OVERALL,
        STREAK_TYPE_MEDITATION,
        STREAK_TYPE_BREATHING,
        STREAK_TYPE_COURSE,
    }
)
