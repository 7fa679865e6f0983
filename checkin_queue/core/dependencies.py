from fastapi import Request

from checkin_queue.services.queue_service import QueueService


def get_queue_service(request: Request) -> QueueService:
    """
    Dependency function for FastAPI endpoints.
    Returns the queue service owned by the running application.
    """
    return request.app.state.queue_service
