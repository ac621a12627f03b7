from stillpoint.rpc.registry import PROCEDURES, call_procedure
from stillpoint.rpc.results import ErrorCode, ProcedureFailure, ProcedureResult, ProcedureSuccess

__all__ = [
    "PROCEDURES",
    "ErrorCode",
    "ProcedureFailure",
    "ProcedureResult",
    "ProcedureSuccess",
    "call_procedure",
]
