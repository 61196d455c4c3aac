"""Centralized constants for ridquiz.

Quiz rules and adapter defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Scoring ----------
SCORE_STEP = 0.5  # per correct sub-answer; two sub-answers per card
MAX_CARD_SCORE = 1.0

# ---------- Navigation ----------
BACK_HISTORY_LIMIT = 5

# ---------- Answer options ----------
MEANING_OPTION_COUNT = 4

# ---------- Session ----------
DEFAULT_SESSION_LENGTH = 20
SESSION_LENGTH_PRESETS = (10, 20, 50, 0)  # 0 = all words

# ---------- Speech ----------
SPEECH_RATE_MIN = 0.2
SPEECH_RATE_MAX = 0.9
SPEECH_RATE_DEFAULT = 0.5
SPEECH_BASE_WPM = 175  # espeak default words per minute
SPEECH_WPM_SPREAD = 0.8  # fraction of base WPM per unit of rate offset

# ---------- Catalog ----------
ENTRY_ID_PREFIX = "vocab_"
