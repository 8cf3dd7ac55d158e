"""
Host-side state observed by the synchronization layer
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from activity_bridge.models.attempts import AttemptState


class CheckResults(BaseModel):
    """Results of a host check cycle, stamped with the triggering timestamp"""
    timestamp: float
    attempt: AttemptState
    results: List[Dict[str, Any]] = Field(default_factory=list)


class HostState(BaseModel):
    """Slice of host state the delivery layer reacts to"""
    current_activity_id: Optional[str] = None
    preview_mode: bool = False
    last_check_triggered: Optional[float] = None
    last_check_results: Optional[CheckResults] = None
    last_mutate_triggered: Optional[float] = None
    last_mutate_changes: Dict[str, Any] = Field(default_factory=dict)
    init_phase_complete: bool = False
    init_state_facts: List[str] = Field(default_factory=list)
    history_navigation_activity: Optional[str] = None
