from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional


class NewTaskRequest(BaseModel):
    title: str
    description: str
    is_important: Optional[bool] = None


class UpdateTaskRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    done: Optional[bool] = None
    is_important: Optional[bool] = None


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    done: bool
    is_important: bool
    created_at: int
    updated_at: int


class TaskIdResponse(BaseModel):
    id: int


class OkResponse(BaseModel):
    ok: bool


class CountResponse(BaseModel):
    count: int


class ErrorResponse(BaseModel):
    detail: str
    kind: str


class TaskRecord(TaskOut):
    model_config = ConfigDict(from_attributes=True, extra="forbid")

    id: int = Field(ge=0)
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    created_at: int = Field(ge=0)
    updated_at: int = Field(ge=0)

    @model_validator(mode="after")
    def check_timestamps(self):
        if self.updated_at < self.created_at:
            raise ValueError("updated_at must not precede created_at")
        return self


class TaskSnapshot(BaseModel):
    """Serializable store state: the records and the next id to hand out."""

    model_config = ConfigDict(extra="forbid")

    next_id: int = Field(ge=0)
    tasks: List[TaskRecord]

    @model_validator(mode="after")
    def check_ids(self):
        ids = [t.id for t in self.tasks]
        if len(set(ids)) != len(ids):
            raise ValueError("snapshot repeats a task id")
        if any(i >= self.next_id for i in ids):
            raise ValueError("next_id must exceed every task id")
        return self
