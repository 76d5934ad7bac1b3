"""
Kudos — Gamification Engine for a Q&A Community
=================================================
Points, badges, leaderboards and community visit streaks for a
StackOverflow-style forum, served over a small REST API.

Package layout::

    kudos/
    ├── config.py              # YAML → typed gameplay config
    ├── database/
    │   ├── engine.py          # SQLAlchemy engine + session helper
    │   └── models.py          # ORM models (users, badges, posts, communities)
    ├── engine/
    │   ├── badges.py          # Badge naming + milestone detection (pure)
    │   ├── streaks.py         # Visit-streak state machine (pure)
    │   └── side_effects.py    # Post-commit, individually failable tasks
    ├── services/
    │   ├── point_service.py       # Points ledger
    │   ├── badge_service.py       # Badge store + milestone/community/leaderboard awarders
    │   ├── post_service.py        # Question/answer creation hooks
    │   ├── community_service.py   # Communities, membership, visit streaks
    │   └── user_service.py        # Users + leaderboard query
    └── api/
        ├── main.py            # FastAPI app
        ├── auth.py            # JWT issuance
        └── routes/            # REST endpoints
"""

__version__ = "0.1.0"
