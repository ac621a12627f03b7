from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from pydantic import BaseModel


class ErrorCode(str, Enum):
    VALIDATION = "E_VALIDATION"
    INSUFFICIENT_FUNDS = "E_INSUFFICIENT_FUNDS"
    NOT_FOUND = "E_NOT_FOUND"
    CONFLICT = "E_CONFLICT"


@dataclass(frozen=True, slots=True)
class ProcedureSuccess:
    payload: BaseModel
    success: Literal[True] = True

    def to_dict(self) -> dict[str, object]:
        return {"success": True, **self.payload.model_dump(mode="json")}


@dataclass(frozen=True, slots=True)
class ProcedureFailure:
    code: ErrorCode
    error: str
    details: dict[str, object] = field(default_factory=dict)
    success: Literal[False] = False

    def to_dict(self) -> dict[str, object]:
        return {"success": False, "error": self.error, "code": self.code.value, **self.details}


ProcedureResult = ProcedureSuccess | ProcedureFailure
