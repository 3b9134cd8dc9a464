from typing import Dict

AI_FOOTER = "AI generated - Verify before you rely on it"
BOT_VERSION = "1.0.0"
BOT_MODE = "Development"

DIFFICULTY_LABELS: Dict[str, str] = {
    "easy": "🟢 Easy",
    "medium": "🟡 Medium",
    "hard": "🔴 Hard",
}

NO_HISTORY = "No challenge history"
SIGN_IN_HINT = "Link your account with **/signin**, then try again."
