import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from apprentice.db.init_db import init_db
from apprentice.settings import get_settings
from apprentice.api.deps import MessageError
from apprentice.api.routers.attacks import router as attacks_router
from apprentice.api.routers.battles import router as battles_router
from apprentice.api.routers.battle_runtime import router as battle_runtime_router
from apprentice.api.routers.save_slots import router as save_slots_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.getLogger("apprentice").setLevel(get_settings().log_level)
    init_db()
    yield


app = FastAPI(title="Wizard's Apprentice Battle Backend", lifespan=lifespan)


@app.exception_handler(MessageError)
async def message_error_handler(request: Request, exc: MessageError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(attacks_router)
app.include_router(battles_router)
app.include_router(battle_runtime_router)
app.include_router(save_slots_router)
