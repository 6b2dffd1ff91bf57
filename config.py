# config.py
# App constants + settings (tweak the recency window or storage key here)

APP = {
    "title": "Dinner Decider",
    "tagline": (
        "Add meals, then let fate decide. "
        "Avoid repeats from the last week if you want."
    ),
    "version": "v0.1",
}

SELECTION = {
    # A meal picked on or after (today - window_days) counts as "recent"
    "window_days": 7,
    "avoid_recent_default": True,
}

STORAGE = {
    # Bump the suffix if the persisted payload shape ever changes
    "state_key": "dinner-decider:v1",
    "sqlite_url": "sqlite:///data.db",
}

CONFIRM = {
    "clear_all": "Clear all meals? This cannot be undone.",
    "reset_all": "Reset all meals and settings? Pick history will be lost.",
}
