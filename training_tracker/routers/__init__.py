from training_tracker.routers.editions import router as editions_router
from training_tracker.routers.tasks import router as tasks_router
from training_tracker.routers.templates import router as templates_router
from training_tracker.routers.activity import router as activity_router

__all__ = ["editions_router", "tasks_router", "templates_router", "activity_router"]
