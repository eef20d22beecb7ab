import logging
import threading
from typing import Any, Callable, List, Optional

import uvicorn
from fastapi import APIRouter, FastAPI, Path, Query, Request
from fastapi.responses import JSONResponse

from .config import get_settings
from .errors import DuplicateTask, InvalidInput, NotFound, TaskError
from .logging_setup import setup_logging
from .schemas import (
    CountResponse,
    ErrorResponse,
    NewTaskRequest,
    OkResponse,
    TaskIdResponse,
    TaskOut,
    UpdateTaskRequest,
)
from .store import Task, TaskStore


logger = logging.getLogger(__name__)

ERROR_STATUS = {
    NotFound: 404,
    InvalidInput: 422,
    DuplicateTask: 409,
}

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _call(request: Request, fn: Callable[[TaskStore], Any]) -> Any:
    # FastAPI runs sync handlers in a thread pool; one lock serializes every store call.
    state = request.app.state
    with state.lock:
        return fn(state.store)


def _tasks(request: Request, fn: Callable[[TaskStore], List[Task]]) -> List[TaskOut]:
    return [TaskOut.model_validate(t) for t in _call(request, fn)]


async def task_error_handler(request: Request, exc: TaskError) -> JSONResponse:
    status = ERROR_STATUS.get(type(exc), 400)
    logger.info("%s %s -> %s %s", request.method, request.url.path, status, exc.kind)
    return JSONResponse(
        status_code=status,
        content=ErrorResponse(detail=str(exc), kind=exc.kind).model_dump(),
    )


# ---- static routes first so they are not captured by /tasks/{task_id} ----


@router.post("", response_model=TaskIdResponse)
def create_task(request: Request, payload: NewTaskRequest):
    task_id = _call(
        request, lambda s: s.create(payload.title, payload.description, payload.is_important)
    )
    logger.info("New task created: id=%s", task_id)
    return TaskIdResponse(id=task_id)


@router.get("", response_model=List[TaskOut])
def get_all_tasks(request: Request):
    return _tasks(request, lambda s: s.list_all())


@router.get("/count", response_model=CountResponse)
def get_total_number_of_tasks(request: Request):
    return CountResponse(count=_call(request, lambda s: s.count()))


@router.get("/important", response_model=List[TaskOut])
def get_important_tasks(request: Request):
    return _tasks(request, lambda s: s.important())


@router.get("/completed", response_model=List[TaskOut])
def get_completed_tasks(request: Request):
    return _tasks(request, lambda s: s.completed())


@router.get("/incomplete", response_model=List[TaskOut])
def get_incomplete_tasks(request: Request):
    return _tasks(request, lambda s: s.incomplete())


@router.get("/search/status", response_model=List[TaskOut])
def search_task_by_status(request: Request, done: bool = Query(...)):
    return _tasks(request, lambda s: s.by_status(done))


@router.get("/search/importance", response_model=List[TaskOut])
def get_tasks_by_importance_status(request: Request, is_important: bool = Query(...)):
    return _tasks(request, lambda s: s.by_importance(is_important))


@router.get("/search/title", response_model=List[TaskOut])
def get_tasks_by_title(request: Request, title: str = Query(...)):
    return _tasks(request, lambda s: s.by_title(title))


@router.get("/search/description", response_model=List[TaskOut])
def get_tasks_by_description(request: Request, description: str = Query(...)):
    return _tasks(request, lambda s: s.by_description(description))


@router.get("/search/created-after", response_model=List[TaskOut])
def get_tasks_created_after(request: Request, timestamp: int = Query(..., ge=0)):
    return _tasks(request, lambda s: s.created_after(timestamp))


@router.get("/search/updated-after", response_model=List[TaskOut])
def get_tasks_updated_after(request: Request, timestamp: int = Query(..., ge=0)):
    return _tasks(request, lambda s: s.updated_after(timestamp))


@router.post("/clear-completed", response_model=OkResponse)
def clear_completed_tasks(request: Request):
    _call(request, lambda s: s.clear_completed())
    return OkResponse(ok=True)


# ---- id-keyed routes ----


@router.get("/{task_id}", response_model=TaskOut)
def get_task(request: Request, task_id: int = Path(..., ge=0)):
    return TaskOut.model_validate(_call(request, lambda s: s.get(task_id)))


@router.patch("/{task_id}", response_model=OkResponse)
def update_task(request: Request, payload: UpdateTaskRequest, task_id: int = Path(..., ge=0)):
    ok = _call(
        request,
        lambda s: s.update(
            task_id,
            title=payload.title,
            description=payload.description,
            done=payload.done,
            is_important=payload.is_important,
        ),
    )
    return OkResponse(ok=ok)


@router.delete("/{task_id}", response_model=OkResponse)
def delete_task(request: Request, task_id: int = Path(..., ge=0)):
    ok = _call(request, lambda s: s.delete(task_id))
    logger.info("Task deleted: id=%s", task_id)
    return OkResponse(ok=ok)


@router.post("/{task_id}/done", response_model=OkResponse)
def mark_task_as_done(request: Request, task_id: int = Path(..., ge=0)):
    return OkResponse(ok=_call(request, lambda s: s.mark_done(task_id)))


@router.post("/{task_id}/reset", response_model=OkResponse)
def reset_task_status(request: Request, task_id: int = Path(..., ge=0)):
    return OkResponse(ok=_call(request, lambda s: s.reset_status(task_id)))


@router.post("/{task_id}/important", response_model=OkResponse)
def mark_task_as_important(request: Request, task_id: int = Path(..., ge=0)):
    return OkResponse(ok=_call(request, lambda s: s.mark_important(task_id)))


@router.post("/{task_id}/toggle-importance", response_model=OkResponse)
def toggle_task_importance(request: Request, task_id: int = Path(..., ge=0)):
    return OkResponse(ok=_call(request, lambda s: s.toggle_importance(task_id)))


def create_app(store: Optional[TaskStore] = None) -> FastAPI:
    app = FastAPI(title="Task Manager Service")
    app.state.store = store if store is not None else TaskStore()
    app.state.lock = threading.Lock()
    app.add_exception_handler(TaskError, task_error_handler)
    app.include_router(router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)
    logger.info("Starting task manager on %s:%s", settings.host, settings.port)
    uvicorn.run("task_manager.main:app", host=settings.host, port=settings.port, log_level=settings.log_level)


if __name__ == "__main__":
    run()
