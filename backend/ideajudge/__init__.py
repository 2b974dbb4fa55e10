"""IdeaJudge — AI-assisted decision support for topics, ideas and axes."""

__version__ = "0.1.0"
