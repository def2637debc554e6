"""
Message envelopes exchanged with the hosting surface.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from flowcanvas.core.constants import MessageType


class MessagePayload(BaseModel):
    """Union of the payload fields used by every message type"""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    workflow: Optional[Dict[str, Any]] = None
    workflow_name: Optional[str] = Field(default=None, alias="workflowName")
    node_id: Optional[str] = Field(default=None, alias="nodeId")
    name: Optional[str] = None
    function_type: Optional[str] = Field(default=None, alias="functionType")
    command: Optional[str] = None
    args: Optional[List[str]] = None
    prompt: Optional[str] = None
    edge_id: Optional[str] = Field(default=None, alias="edgeId")
    error: Optional[str] = None


class Message(BaseModel):
    """``{"type": ..., "payload": {...}}`` envelope"""
    model_config = ConfigDict(populate_by_name=True)

    type: str
    payload: Optional[MessagePayload] = None
    edge_id: Optional[str] = Field(default=None, alias="edgeId")

    @classmethod
    def build(cls, message_type: MessageType, **payload: Any) -> "Message":
        return cls(type=message_type.value, payload=MessagePayload(**payload) if payload else None)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
