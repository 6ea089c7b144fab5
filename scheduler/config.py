MIN_INTERVAL_MS = 10 * 60 * 1000   # 10 minutes, floor for every interval
MS_PER_DAY = 24 * 60 * 60 * 1000

STRENGTH_WINDOW = 10               # reviews considered for mastery
FALLBACK_WEIGHT = 0.25             # weight past the end of the weight table
RESULT_SCORES = {
    "again": 0.0,
    "hard": 0.25,
    "good": 0.75,
    "easy": 1.0,
}
