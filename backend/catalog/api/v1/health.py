from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from catalog.api.response import envelope
from catalog.db.session import get_db

router = APIRouter(tags=['ops'])


@router.get('/health')
def health(request: Request) -> dict:
    return envelope(request, {'status': 'ok'})


@router.get('/health/readiness')
def readiness(request: Request, db: Session = Depends(get_db)) -> dict:
    try:
        db.execute(text('SELECT 1'))
        db_ok = True
    except SQLAlchemyError:
        db_ok = False
    return envelope(
        request,
        {
            'status': 'ready' if db_ok else 'degraded',
            'dependencies': {'database': db_ok},
        },
    )
