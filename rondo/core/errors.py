class RondoError(Exception):
    pass


class NotFoundError(RondoError):
    pass


class ValidationError(RondoError):
    pass


class CycleError(ValidationError):
    def __init__(self, task_id: int, blocker_id: int):
        self.task_id = task_id
        self.blocker_id = blocker_id
        super().__init__(f"task {blocker_id} cannot block task {task_id}: dependency cycle")
