"""
Pydantic models for authoring and delivery
"""
from activity_bridge.models.content import *
from activity_bridge.models.attempts import *
from activity_bridge.models.activities import *
from activity_bridge.models.cata import *
from activity_bridge.models.bridge import *
from activity_bridge.models.host import *
