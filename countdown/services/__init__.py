from countdown.services import day_counter, exclusion_service, task_service


__all__ = [
    "day_counter",
    "exclusion_service",
    "task_service",
]
