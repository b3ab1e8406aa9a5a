# File: camswitch/core/common/errors.py


class CameraSwitchingError(Exception):
    """Root of every error raised by the switching engine."""


# --- Session references (the only category callers see during ingestion) ---

class SessionNotFound(CameraSwitchingError, LookupError):
    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} not found.")
        self.session_id = session_id


class SessionInactive(CameraSwitchingError, RuntimeError):
    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} is not active.")
        self.session_id = session_id


class InvalidSessionState(CameraSwitchingError, RuntimeError):
    """Session cannot be evaluated (e.g. no auto-switch eligible camera)."""


# --- Input validation ---

class InvalidSignalData(CameraSwitchingError, ValueError):
    pass


class InvalidOptions(CameraSwitchingError, ValueError):
    pass


class EmptyCameraSet(CameraSwitchingError, ValueError):
    pass


class RuleNotFound(CameraSwitchingError, LookupError):
    def __init__(self, rule_id: str):
        super().__init__(f"Switching rule {rule_id} not found.")
        self.rule_id = rule_id


class InvalidRuleUpdate(CameraSwitchingError, ValueError):
    pass


# --- Execution ---

class SwitchTargetUnreachable(CameraSwitchingError, RuntimeError):
    def __init__(self, camera_id: str, reason: str = "unreachable"):
        super().__init__(f"Camera {camera_id} is {reason}.")
        self.camera_id = camera_id


class CooldownActive(CameraSwitchingError):
    """
    Informational. The executor records it as a failed event
    and never raises it to the caller.
    """

    code = "cooldown_active"

    def __init__(self, remaining_seconds: float):
        super().__init__(f"Cooldown active for another {remaining_seconds:.3f}s.")
        self.remaining_seconds = remaining_seconds
