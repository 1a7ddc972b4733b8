# Group Constants
PLAYERS_PER_GROUP = 4
CANDIDATE_POOL_SIZE = 16  # C(16, 4) = 1820 groups searched at most

# Scoring Weights (lower score is better)
GAMES_WEIGHT = 10_000_000
LEVEL_WEIGHT = 100_000
ODD_GENDER_PENALTY = 50_000
PARTNER_TOGETHER_REWARD = -1_000
PARTNER_EXCLUDED_PENALTY = 25_000

# Player Defaults
DEFAULT_LEVEL = 10

# Gender markers accepted in roster text (the Chinese ones come from older exports)
GENDER_MARKERS = {"M": "M", "F": "F", "男": "M", "女": "F"}

# Setup Constants
DEFAULT_NUM_COURTS = 3
COURT_NAME_FORMAT = "Court {}"
DEFAULT_SESSION_NAME = "club-night"
DEFAULT_RECOMMENDER_ENABLED = True
SESSIONS_DIR = "sessions"
