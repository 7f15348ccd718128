import logging

import uvicorn
from dotenv import load_dotenv

load_dotenv()

from config import API_HOST, API_PORT, GENERATION_PROVIDER
from logging_setup import setup_logging
from api.app import app
from api.auth.routes import auth_router
from api.generation.routes import router as generation_router
from api.todos.routes import todos_router
from api.uploads.routes import uploads_router

# Configure root logging once (respects LOG_LEVEL env).
setup_logging()

logging.info(f"Application starting up (generation provider: {GENERATION_PROVIDER})...")

# Include routers
app.include_router(auth_router, prefix="/auth", tags=["Auth"])
app.include_router(todos_router, prefix="/api/todos", tags=["Todos"])
app.include_router(uploads_router)
app.include_router(generation_router)

if __name__ == "__main__":
    uvicorn.run(app, host=API_HOST, port=API_PORT)
