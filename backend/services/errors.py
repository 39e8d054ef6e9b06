class HabitEngineError(Exception):
    """Base class for failures local to a single engine operation."""


class NotFoundError(HabitEngineError):
    """Raised when an operation references an id absent from its collection."""

    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"{collection} record '{record_id}' not found")


class InvalidGoalValueError(HabitEngineError):
    """Raised when a goal-based habit is completed without a usable numeric value."""


class ScheduleRuleUnrecognizedError(HabitEngineError):
    """Raised by strict schedule parsing when a habit carries an unknown rule tag."""

    def __init__(self, rule: object):
        self.rule = rule
        super().__init__(f"Unrecognized schedule rule: {rule!r}")
