from app.tasks.title_task import run_title_generation

__all__ = [
    "run_title_generation",
]
