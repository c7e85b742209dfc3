"""Central constants for Streamlit session state keys and defaults."""

SS_GOALS: str = "goals"
SS_ENTRIES: str = "entries"
SS_REVIEW_TASKS: str = "review_tasks"
SS_RAW_TRANSCRIPTION: str = "raw_transcription"

MIN_SCORE: int = 0
MAX_SCORE: int = 100
