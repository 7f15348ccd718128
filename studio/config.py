import os
import dotenv

# Load environment variables from .env file
dotenv.load_dotenv()

# Generation provider: "vertex" (Gemini via google-genai) or "gateway" (chat-completions gateway)
GENERATION_PROVIDER = os.getenv("GENERATION_PROVIDER", "vertex").lower()

# Vertex AI / Gemini Configuration
# When GOOGLE_PROJECT_ID is set the client talks to Vertex AI, otherwise it falls back to
# the Gemini Developer API with GEMINI_API_KEY (or GOOGLE_API_KEY).
GOOGLE_PROJECT_ID = os.getenv("GOOGLE_PROJECT_ID")
GOOGLE_LOCATION = os.getenv("GOOGLE_LOCATION", "us-central1")
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
VERTEX_MODEL = os.getenv("VERTEX_MODEL", "gemini-2.5-flash-image")

# AI gateway (OpenAI-style chat completions with image output)
GATEWAY_URL = os.getenv("GATEWAY_URL", "https://ai.gateway.lovable.dev/v1/chat/completions")
GATEWAY_API_KEY = os.getenv("GATEWAY_API_KEY") or os.getenv("LOVABLE_API_KEY")
GATEWAY_MODEL = os.getenv("GATEWAY_MODEL", "google/gemini-2.5-flash-image-preview")

# Auth Configuration
JWT_SECRET = os.getenv("JWT_SECRET", "your_secret_key")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

# Database Configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///tryon.db")

# Uploads
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")

# Base64 photos are sent inline, so the request ceiling is generous.
MAX_REQUEST_BYTES = int(os.getenv("MAX_REQUEST_BYTES", str(50 * 1024 * 1024)))

# Server
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "5000"))

# Client
TRYON_API_URL = os.getenv("TRYON_API_URL", "http://localhost:5000")

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "false").lower() == "true"
LOG_FILE_PATH = os.getenv("LOG_FILE_PATH", "tryon.log")
# Separate file for the human-readable loguru sink
CONSOLE_LOG_FILE_PATH = os.getenv("CONSOLE_LOG_FILE_PATH", "tryon-console.log")

# CORS Origins
CORS_ORIGINS = [
    "http://localhost",
    "http://localhost:5173",
    "http://localhost:8080",
    "http://127.0.0.1",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:8080",
]
_extra_origins = os.getenv("CORS_EXTRA_ORIGINS")
if _extra_origins:
    CORS_ORIGINS.extend(o.strip() for o in _extra_origins.split(",") if o.strip())
