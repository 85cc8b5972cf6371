class RouterError(Exception):
    """Base class for lead routing errors."""


class InvalidInput(RouterError):
    pass


class NoActiveAgents(RouterError):
    def __init__(self, message: str = "No active agents available"):
        super().__init__(message)


class DuplicateRoutingAddress(RouterError):
    def __init__(self, wa_number: str):
        self.wa_number = wa_number
        super().__init__(f"An agent with wa_number {wa_number} already exists")


class NotificationFailure(RouterError):
    """Agent notification could not be delivered."""

    def __init__(self, detail):
        self.detail = detail
        super().__init__(str(detail))


class MissingSenderIdentity(NotificationFailure):
    """Neither the agent nor the process config provide a usable sender."""
