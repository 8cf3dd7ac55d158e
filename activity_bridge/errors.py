"""
Domain errors
"""


class ActivityBridgeError(Exception):
    """Base class for activity bridge errors"""


class BridgeStateError(ActivityBridgeError):
    """Raised when a bridge lifecycle call does not fit its current state"""


class UnknownChoiceError(ActivityBridgeError, KeyError):
    """Raised when an edit targets a choice that is not in the model"""


class UnknownResponseError(ActivityBridgeError, KeyError):
    """Raised when an edit targets a response that is not in the model"""


class UnknownHintError(ActivityBridgeError, KeyError):
    """Raised when an edit targets a hint that is not in the first part"""


class RuleSyntaxError(ActivityBridgeError, ValueError):
    """Raised when a rule expression cannot be parsed"""
