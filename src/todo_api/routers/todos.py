from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from ..models import Priority, TodoEntity
from ..schemas import TodoCreate, TodoOut, TodoUpdate
from ..services import TodoService, get_todo_service

router = APIRouter(
    prefix="/api/todos",
    tags=["todos"],
)

_NOT_FOUND = {"description": "Todo not found"}

# Largest id an SQLite INTEGER column can hold
_MAX_TODO_ID = 2**63 - 1


def _out(entity: TodoEntity) -> TodoOut:
    return TodoOut(**entity)  # type: ignore[arg-type]


def _out_list(entities: List[TodoEntity]) -> List[TodoOut]:
    return [_out(e) for e in entities]


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Todo not found")


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TodoOut],
    summary="Get all todos",
    description="Retrieves a list of all todos.",
    responses={200: {"description": "Successfully retrieved all todos"}},
)
def list_todos(service: TodoService = Depends(get_todo_service)) -> List[TodoOut]:
    return _out_list(service.list_all())


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new todo",
    description="Create a new Todo item and return the created resource.",
    responses={
        201: {"description": "Todo created successfully"},
        400: {"description": "Validation error"},
    },
)
def create_todo(payload: TodoCreate, service: TodoService = Depends(get_todo_service)) -> TodoOut:
    """
    Create a new Todo. `completed` defaults to false and `priority` to MEDIUM.
    """
    return _out(service.create(payload))


# PUBLIC_INTERFACE
@router.get(
    "/status/{completed}",
    response_model=List[TodoOut],
    summary="Get todos by completion status",
    description="Retrieves todos filtered by completion status.",
    responses={200: {"description": "Successfully retrieved todos"}},
)
def list_todos_by_completed(
    completed: bool = Path(..., description="Completion status (true/false)"),
    service: TodoService = Depends(get_todo_service),
) -> List[TodoOut]:
    return _out_list(service.list_by_completed(completed))


# PUBLIC_INTERFACE
@router.get(
    "/priority/{priority}",
    response_model=List[TodoOut],
    summary="Get todos by priority",
    description="Retrieves todos filtered by priority level.",
    responses={200: {"description": "Successfully retrieved todos"}},
)
def list_todos_by_priority(
    priority: Priority = Path(..., description="Priority level (LOW, MEDIUM, HIGH)"),
    service: TodoService = Depends(get_todo_service),
) -> List[TodoOut]:
    return _out_list(service.list_by_priority(priority))


# PUBLIC_INTERFACE
@router.get(
    "/search",
    response_model=List[TodoOut],
    summary="Search todos by title",
    description="Searches todos by title (case-insensitive substring match).",
    responses={200: {"description": "Successfully retrieved matching todos"}},
)
def search_todos(
    title: str = Query(..., description="Search term for title"),
    service: TodoService = Depends(get_todo_service),
) -> List[TodoOut]:
    return _out_list(service.search_by_title(title))


# PUBLIC_INTERFACE
@router.get(
    "/filter",
    response_model=List[TodoOut],
    summary="Get todos by completion status and priority",
    description="Retrieves todos matching both a completion status and a priority level.",
    responses={200: {"description": "Successfully retrieved todos"}},
)
def filter_todos(
    completed: bool = Query(..., description="Completion status (true/false)"),
    priority: Priority = Query(..., description="Priority level (LOW, MEDIUM, HIGH)"),
    service: TodoService = Depends(get_todo_service),
) -> List[TodoOut]:
    return _out_list(service.list_by_completed_and_priority(completed, priority))


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Get todo by ID",
    description="Get a single Todo item by ID.",
    responses={
        200: {"description": "Todo found"},
        404: _NOT_FOUND,
    },
)
def get_todo(
    todo_id: int = Path(..., ge=1, le=_MAX_TODO_ID, description="Todo ID"),
    service: TodoService = Depends(get_todo_service),
) -> TodoOut:
    item = service.get_by_id(todo_id)
    if item is None:
        raise _not_found()
    return _out(item)


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Update a todo",
    description=(
        "Replace an existing Todo item. Any fields omitted will be set to their default/null "
        "equivalent as per the schema."
    ),
    responses={
        200: {"description": "Todo updated successfully"},
        404: _NOT_FOUND,
    },
)
def update_todo(
    payload: TodoUpdate,
    todo_id: int = Path(..., ge=1, le=_MAX_TODO_ID, description="Todo ID"),
    service: TodoService = Depends(get_todo_service),
) -> TodoOut:
    updated = service.update(todo_id, payload)
    if updated is None:
        raise _not_found()
    return _out(updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a todo",
    description="Delete a Todo item by ID.",
    responses={
        204: {"description": "Todo deleted successfully"},
        404: _NOT_FOUND,
    },
)
def delete_todo(
    todo_id: int = Path(..., ge=1, le=_MAX_TODO_ID, description="Todo ID"),
    service: TodoService = Depends(get_todo_service),
) -> None:
    """
    Delete a Todo. Returns 204 on success, 404 if not found.
    """
    if not service.delete(todo_id):
        raise _not_found()
    return None


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}/toggle",
    response_model=TodoOut,
    summary="Toggle todo completion",
    description="Toggles the completion status of a todo.",
    responses={
        200: {"description": "Todo toggled successfully"},
        404: _NOT_FOUND,
    },
)
def toggle_todo(
    todo_id: int = Path(..., ge=1, le=_MAX_TODO_ID, description="Todo ID"),
    service: TodoService = Depends(get_todo_service),
) -> TodoOut:
    toggled = service.toggle_completion(todo_id)
    if toggled is None:
        raise _not_found()
    return _out(toggled)
