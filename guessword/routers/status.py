from fastapi import APIRouter, HTTPException, Query, status

from ..dependencies import GameSessionDep

router = APIRouter()


@router.get("/")
def root():
    return {"hello": "guessword"}


@router.get("/status")
def read_status(session: GameSessionDep):
    return session.status()


@router.get("/highscores")
async def read_highscores(
        session: GameSessionDep, limit: int = Query(default=10, ge=1, le=100)
):
    if session.score_store is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No score store configured")
    try:
        return await session.score_store.top_scores(limit)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Score store unavailable: {e}",
        ) from e
