from fastapi import HTTPException, Request

from blog_engine.store import Store


def get_store(request: Request) -> Store:
    """The process store created by create_app()."""
    return request.app.state.store


def found(record, kind: str, record_id: str):
    """Return the record or answer 404."""
    if record is None:
        raise HTTPException(status_code=404, detail=f"{kind} {record_id} not found")
    return record
