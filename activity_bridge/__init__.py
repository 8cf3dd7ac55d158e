"""
Activity bridge: delivery protocol between a host page and opaque learning
activities, plus the response rule algebra used to author CATA questions.
"""

__version__ = "0.3.0"
