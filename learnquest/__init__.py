"""LearnQuest progression engine: XP, levels, streaks and achievements for one learner"""

__version__ = "0.1.0"
