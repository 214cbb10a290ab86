"""Brain Bites: answer trivia questions to earn screen time."""

__version__ = "0.1.0"
