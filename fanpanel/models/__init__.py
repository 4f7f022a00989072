from fanpanel.models.actions import PendingAction, ReleaseInfo, ScriptResult
from fanpanel.models.config import StageRequest, ValidateRequest

__all__ = ["PendingAction", "ReleaseInfo", "ScriptResult", "StageRequest", "ValidateRequest"]
