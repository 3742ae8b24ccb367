from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from personachat.core.logging_config import setup_logging

setup_logging()

from personachat.core.config import settings
from personachat.core.errors import register_exception_handlers
from personachat.database import init_db
from personachat.routers import admin, auth, characters, chat, notifications, users

init_db()
app = FastAPI(title="PersonaChat API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(characters.router)
app.include_router(chat.router)
app.include_router(notifications.router)
app.include_router(admin.router)

@app.get("/")
async def root():
    return {"message": "Hello, PersonaChat here!"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("personachat.main:app", host="0.0.0.0", port=3001, reload=not settings.is_production)
