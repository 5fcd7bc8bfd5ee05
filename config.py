"""Configuration for the Lesson Player service."""

# Lesson content
# JSON lesson files are read from <LESSON_CONTENT_DIR>/lessons/*.json
# None uses the bundled education/assets directory. Sample lessons are
# written there on first start if the lessons directory does not exist.
LESSON_CONTENT_DIR = None
DEFAULT_SCENE_DURATION_MS = 4000  # Used when a scene omits "duration_ms"

# Catalog ordering, easiest first
DIFFICULTY_LEVELS = ["Beginner", "Intermediate", "Advanced", "Expert"]

# Sessions
AUTOPLAY_ON_OPEN = True   # Start scene playback as soon as a lesson is opened
MAX_OPEN_SESSIONS = 64    # Per process, results are kept in memory only
SESSION_IDLE_TIMEOUT_S = 1800  # Idle sessions are closed when a new one is opened; None disables

# Quiz feedback
# (minimum percentage, icon, message), checked top to bottom
SCORE_MESSAGE_THRESHOLDS = [
    (90, "trophy", "Excellent! You've mastered this topic!"),
    (70, "star", "Great job! You have a solid understanding!"),
    (50, "check", "Good effort! Review the material and try again."),
    (0, "lightbulb", "Keep learning! Practice makes perfect."),
]

# API Server
API_HOST = "0.0.0.0"
API_PORT = 8000
CORS_ALLOW_ORIGINS = ["*"]
