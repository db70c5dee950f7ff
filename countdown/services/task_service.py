"""Operations on the task list.

All functions return new values and leave their inputs untouched.
"""

from datetime import date

from countdown.domain.task import Task, new_task_id


def add_task(tasks: list[Task], text: str, due_date: date | None = None) -> tuple[list[Task], Task]:
    """Append a new open task and return the new list with the created task.

    Raises:
        ValueError: If text is blank
    """
    cleaned = text.strip()
    if not cleaned:
        raise ValueError("Task text must not be empty")

    existing_ids = {task.id for task in tasks}
    task_id = new_task_id()
    while task_id in existing_ids:
        task_id = new_task_id()

    task = Task(id=task_id, text=cleaned, completed=False, due_date=due_date)
    return [*tasks, task], task


def _find(tasks: list[Task], task_id: str) -> Task:
    for task in tasks:
        if task.id == task_id:
            return task
    msg = f"Task not found: {task_id}"
    raise KeyError(msg)


def toggle_task(tasks: list[Task], task_id: str) -> tuple[list[Task], Task]:
    """Flip a task's completed flag.

    Raises:
        KeyError: If no task has task_id
    """
    current = _find(tasks, task_id)
    toggled = current.model_copy(update={"completed": not current.completed})
    return [toggled if task.id == task_id else task for task in tasks], toggled


def delete_task(tasks: list[Task], task_id: str) -> list[Task]:
    """Remove a task.

    Raises:
        KeyError: If no task has task_id
    """
    _find(tasks, task_id)
    return [task for task in tasks if task.id != task_id]


def sort_tasks(tasks: list[Task]) -> list[Task]:
    """Open tasks first; within each group, earliest due date first and undated last."""
    return sorted(
        tasks,
        key=lambda task: (task.completed, task.due_date is None, task.due_date or date.max),
    )


def pending_count(tasks: list[Task]) -> int:
    return sum(1 for task in tasks if not task.completed)
