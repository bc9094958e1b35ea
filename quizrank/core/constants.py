"""Bounds and fixed vocabularies shared across the service."""

OPTION_LETTERS = ("A", "B", "C", "D")

# Quiz generation bounds
MIN_QUESTIONS = 5
MAX_QUESTIONS = 30
DEFAULT_QUESTIONS = 10

MIN_QUIZ_DURATION_MINUTES = 2
MAX_QUIZ_DURATION_MINUTES = 60

MIN_EXAM_DURATION_MINUTES = 5
MAX_EXAM_DURATION_MINUTES = 180
DEFAULT_EXAM_DURATION_MINUTES = 60

MAX_TOP_RANKERS = 100

# Client timer readings larger than a day are rejected at the request boundary
MAX_TIME_SECONDS = 24 * 60 * 60
